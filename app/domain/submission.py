"""SQLAlchemy ORM model for supplier batch submissions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import SubmissionStatus
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Submission(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One supplier registration/compliance batch.

    Mutated only by the review state machine. ``reviewer_id`` is set while the
    submission is in review or decided, and cleared again on release.
    """

    __tablename__ = "submissions"

    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=False, index=True
    )
    # Ordered list of {"kind": ..., "reference": ...}
    documents: Mapped[List[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    document_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # "pending" | "in_review" | "verified" | "rejected"
    status: Mapped[str] = mapped_column(
        String(20), default=SubmissionStatus.PENDING.value, nullable=False, index=True
    )
    reviewer_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
