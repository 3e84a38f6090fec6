"""Payout request Pydantic schemas."""


from datetime import datetime
from typing import Any, Literal

from app.domain.enums import PayoutStatus
from app.schemas.common import CamelModel, Money

class PayoutCreate(CamelModel):
    # Defaults to the calling supplier's own account
    account_id: str | None = None
    amount: Money

class DecisionIn(CamelModel):
    outcome: Literal["approved", "rejected"]
    reason: str | None = None

class MarkPaidIn(CamelModel):
    external_reference: str | None = None

class PayoutOut(CamelModel):
    id: str
    account_id: str
    amount: Money
    status: PayoutStatus
    payment_details: dict[str, Any] | None = None
    decided_by: str | None = None
    decision_reason: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    paid_by: str | None = None
    paid_at: datetime | None = None
    external_reference: str | None = None
    created_at: datetime
    updated_at: datetime
