"""SQLAlchemy ORM models for accounts and the earnings ledger that feeds them."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import AccountStatus, Role, VerificationStatus
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class Account(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A supplier or admin identity. Deactivated, never deleted."""

    __tablename__ = "accounts"

    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # "active" | "deactivated"
    status: Mapped[str] = mapped_column(
        String(20), default=AccountStatus.ACTIVE.value, nullable=False
    )
    deactivated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # "unverified" | "verified", flipped by the review state machine
    verification_status: Mapped[str] = mapped_column(
        String(20), default=VerificationStatus.UNVERIFIED.value, nullable=False, index=True
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Running total of the earnings ledger; payouts are never netted in here
    total_earned: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False
    )

    # {"method": "esewa", "wallet_id": ...}, required before the first payout request
    payout_profile: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value


class EarningEntry(Base, UUIDPrimaryKeyMixin):
    """Append-only credit to a supplier's earnings (never updated or deleted)."""

    __tablename__ = "earning_entries"

    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # "submission_verified" | "manual"
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    submission_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    actor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
