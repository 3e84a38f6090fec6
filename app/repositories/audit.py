"""Audit trail repository: append and read only."""

from __future__ import annotations

from app.domain.audit import AuditEntry
from app.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditEntry]):
    model = AuditEntry

    async def history(self, entity_type: str, entity_id: str) -> list[AuditEntry]:
        return await self.query(
            AuditEntry.entity_type == entity_type,
            AuditEntry.entity_id == entity_id,
            order_by="id",
        )
