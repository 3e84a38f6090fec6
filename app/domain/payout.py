"""SQLAlchemy ORM model for supplier payout requests."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import PayoutStatus
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class PayoutRequest(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "payout_requests"

    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Copy of the account's payout profile at request time
    payment_details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # "requested" | "approved" | "rejected" | "paid"
    status: Mapped[str] = mapped_column(
        String(20), default=PayoutStatus.REQUESTED.value, nullable=False, index=True
    )
    decided_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    decision_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    paid_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Opaque bank/wallet transaction id, recorded for audit only
    external_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
