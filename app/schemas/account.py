"""Account Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from typing import Any

from app.domain.enums import Role
from app.schemas.common import CamelModel, Money

class AccountCreate(CamelModel):
    display_name: str
    email: str
    phone: str | None = None
    role: Role = Role.SUPPLIER

class PayoutProfileIn(CamelModel):
    method: str
    wallet_id: str | None = None
    wallet_name: str | None = None
    qr_code_url: str | None = None
    bank_name: str | None = None
    account_holder_name: str | None = None
    account_number: str | None = None

class DeactivateIn(CamelModel):
    reason: str | None = None

class CreditIn(CamelModel):
    amount: Money
    note: str | None = None

class AccountOut(CamelModel):
    id: str
    role: Role
    display_name: str
    email: str
    phone: str | None = None
    status: str
    verification_status: str
    verified_at: datetime | None = None
    deactivated_at: datetime | None = None
    total_earned: Money
    payout_profile: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime

class EarningOut(CamelModel):
    id: str
    account_id: str
    amount: Money
    source: str
    submission_id: str | None = None
    actor_id: str
    note: str | None = None
    created_at: datetime

class BalanceOut(CamelModel):
    account_id: str
    total_earned: Money
    committed: Money
    reserved: Money
    available: Money
    requestable: Money
