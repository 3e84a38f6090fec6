"""Audit recorder: stages one AuditEntry per applied transition.

Entries are added to the caller's session so they commit (or roll back)
together with the status change they describe.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.domain.audit import AuditEntry
from app.domain.enums import EntityType
from app.repositories.audit import AuditRepository

logger = logging.getLogger(__name__)


class AuditRecorder:
    def __init__(self, session: AsyncSession):
        self._repo = AuditRepository(session)

    async def record(
        self,
        entity_type: EntityType,
        entity_id: str,
        actor: Actor,
        prior_status: str | None,
        new_status: str,
        reason: str | None = None,
    ) -> AuditEntry:
        entry = await self._repo.put(
            AuditEntry(
                entity_type=entity_type.value,
                entity_id=entity_id,
                actor_id=actor.id,
                prior_status=prior_status,
                new_status=new_status,
                reason=reason,
            )
        )
        logger.debug(
            "audit staged %s %s: %s -> %s by %s",
            entity_type.value, entity_id, prior_status or "-", new_status, actor,
        )
        return entry

    async def history(self, entity_type: EntityType, entity_id: str) -> list[AuditEntry]:
        return await self._repo.history(entity_type.value, entity_id)
