"""Audit trail response schema."""


from datetime import datetime

from app.schemas.common import CamelModel

class AuditEntryOut(CamelModel):
    id: int
    entity_type: str
    entity_id: str
    actor_id: str
    prior_status: str | None = None
    new_status: str
    reason: str | None = None
    created_at: datetime
