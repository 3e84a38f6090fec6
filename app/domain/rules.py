"""Validating constructors and pure predicates for the domain entities.

Constructors collect every structural problem before raising, so a caller gets
one :class:`~app.core.exceptions.ValidationError` listing all offending fields.
Predicates never touch the database; services hand them freshly loaded rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from app.core.exceptions import ValidationError
from app.domain.account import Account
from app.domain.enums import (
    COMMITTED_PAYOUT_STATUSES,
    AccountStatus,
    PaymentMethod,
    PayoutStatus,
    Role,
    SubmissionStatus,
    VerificationStatus,
)
from app.domain.payout import PayoutRequest
from app.domain.submission import Submission

ZERO = Decimal("0")
CENT = Decimal("0.01")

_PROFILE_FIELDS: dict[PaymentMethod, tuple[str, ...]] = {
    PaymentMethod.ESEWA: ("wallet_id",),
    PaymentMethod.KHALTI: ("wallet_id",),
    PaymentMethod.BANK_TRANSFER: ("bank_name", "account_holder_name", "account_number"),
}
_PROFILE_OPTIONAL = ("wallet_name", "qr_code_url")


class Violations:
    """Accumulates field errors and raises them together."""

    def __init__(self) -> None:
        self.errors: dict[str, list[str]] = {}

    def __bool__(self) -> bool:
        return bool(self.errors)

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def require_text(self, field: str, value: Any) -> str | None:
        if not isinstance(value, str) or not value.strip():
            self.add(field, "is required")
            return None
        return value.strip()

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def _parse_amount(violations: Violations, field: str, value: Any) -> Decimal | None:
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        violations.add(field, "must be a number")
        return None
    if not amount.is_finite():
        violations.add(field, "must be a number")
        return None
    if amount <= ZERO:
        violations.add(field, "must be positive")
        return None
    if amount != amount.quantize(CENT):
        violations.add(field, "must have at most 2 decimal places")
        return None
    return amount.quantize(CENT)


def require_reason(field: str, reason: str | None) -> str:
    """Return the stripped reason or raise ``ValidationError`` when it is blank."""
    if reason is None or not reason.strip():
        raise ValidationError.single(field, "is required")
    return reason.strip()


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def new_account(
    *, role: Any, display_name: Any, email: Any, phone: str | None = None
) -> Account:
    v = Violations()
    try:
        role = Role(role)
    except ValueError:
        v.add("role", f"must be one of: {', '.join(r.value for r in Role)}")
    name = v.require_text("display_name", display_name)
    mail = v.require_text("email", email)
    if mail and ("@" not in mail or mail.startswith("@") or mail.endswith("@")):
        v.add("email", "is not a valid email address")
    v.raise_if_any()
    return Account(
        role=role.value,
        display_name=name,
        email=mail.lower(),
        phone=phone.strip() if phone else None,
        status=AccountStatus.ACTIVE.value,
        verification_status=VerificationStatus.UNVERIFIED.value,
        total_earned=ZERO,
    )


def validate_payout_profile(profile: Mapping[str, Any]) -> dict[str, Any]:
    """Check a payout profile and return its normalized form."""
    v = Violations()
    try:
        method = PaymentMethod(profile.get("method"))
    except ValueError:
        v.add("method", f"must be one of: {', '.join(m.value for m in PaymentMethod)}")
        v.raise_if_any()

    cleaned: dict[str, Any] = {"method": method.value}
    for field in _PROFILE_FIELDS[method]:
        value = v.require_text(field, profile.get(field))
        if value:
            cleaned[field] = value
    for field in _PROFILE_OPTIONAL:
        if profile.get(field):
            cleaned[field] = str(profile[field]).strip()
    v.raise_if_any()
    return cleaned


def new_submission(
    *,
    account_id: Any,
    documents: Iterable[Mapping[str, Any]] | None,
    max_documents: int,
) -> Submission:
    v = Violations()
    owner = v.require_text("account_id", account_id)
    docs = list(documents or [])
    if not docs:
        v.add("documents", "must contain at least one document")
    elif len(docs) > max_documents:
        v.add("documents", f"must contain at most {max_documents} documents")

    cleaned: list[dict[str, str]] = []
    seen: set[str] = set()
    for index, doc in enumerate(docs):
        if not isinstance(doc, Mapping):
            v.add(f"documents[{index}]", "must be an object with kind and reference")
            continue
        kind = v.require_text(f"documents[{index}].kind", doc.get("kind"))
        reference = v.require_text(f"documents[{index}].reference", doc.get("reference"))
        if reference:
            key = reference.lower()
            if key in seen:
                v.add(f"documents[{index}].reference", "duplicates an earlier document")
            seen.add(key)
        if kind and reference:
            cleaned.append({"kind": kind.lower(), "reference": reference})
    v.raise_if_any()
    return Submission(
        account_id=owner,
        documents=cleaned,
        document_count=len(cleaned),
        status=SubmissionStatus.PENDING.value,
    )


def new_payout_request(
    *,
    account_id: Any,
    amount: Any,
    payment_details: Mapping[str, Any] | None,
    min_amount: Decimal = ZERO,
) -> PayoutRequest:
    v = Violations()
    owner = v.require_text("account_id", account_id)
    value = _parse_amount(v, "amount", amount)
    if value is not None and min_amount and value < min_amount:
        v.add("amount", f"must be at least {min_amount}")
    if not payment_details:
        v.add("payout_profile", "set up a payout method before requesting a payout")
    v.raise_if_any()
    return PayoutRequest(
        account_id=owner,
        amount=value,
        payment_details=dict(payment_details),
        status=PayoutStatus.REQUESTED.value,
    )


def parse_amount(amount: Any, field: str = "amount") -> Decimal:
    v = Violations()
    value = _parse_amount(v, field, amount)
    v.raise_if_any()
    return value


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_verified(account: Account) -> bool:
    return account.verification_status == VerificationStatus.VERIFIED.value


def committed_total(payout_history: Iterable[PayoutRequest]) -> Decimal:
    """Sum of payouts that have already left the balance (approved or paid)."""
    return sum(
        (Decimal(p.amount) for p in payout_history if p.status in COMMITTED_PAYOUT_STATUSES),
        ZERO,
    )


def reserved_total(payout_history: Iterable[PayoutRequest]) -> Decimal:
    """Sum of requests still awaiting a decision."""
    return sum(
        (Decimal(p.amount) for p in payout_history if p.status == PayoutStatus.REQUESTED.value),
        ZERO,
    )


def available_balance(account: Account, payout_history: Iterable[PayoutRequest]) -> Decimal:
    """Total earned minus every approved or paid payout."""
    return Decimal(account.total_earned or ZERO) - committed_total(payout_history)


def requestable_balance(account: Account, payout_history: Iterable[PayoutRequest]) -> Decimal:
    """Available balance less the amounts already reserved by open requests."""
    history = list(payout_history)
    return available_balance(account, history) - reserved_total(history)


def can_request_payout(
    account: Account, amount: Decimal, payout_history: Iterable[PayoutRequest]
) -> bool:
    if not is_verified(account) or not account.is_active:
        return False
    return ZERO < amount <= requestable_balance(account, payout_history)
