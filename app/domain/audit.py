"""SQLAlchemy ORM model for the status-transition audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import utcnow


class AuditEntry(Base):
    __tablename__ = "audit_entries"

    # Autoincrement id doubles as the append order for history replay
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # What
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    prior_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Who
    actor_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # When (no updated_at: audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
