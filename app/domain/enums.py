"""Status and role vocabularies shared by the ORM models, services and schemas.

Columns store the ``.value`` strings; the enums subclass ``str`` so comparisons
against raw column values work either way.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPPLIER = "supplier"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PayoutStatus(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PaymentMethod(str, Enum):
    ESEWA = "esewa"
    KHALTI = "khalti"
    BANK_TRANSFER = "bank_transfer"


class EntityType(str, Enum):
    ACCOUNT = "account"
    SUBMISSION = "submission"
    PAYOUT_REQUEST = "payout_request"


TERMINAL_SUBMISSION_STATUSES = frozenset(
    {SubmissionStatus.VERIFIED.value, SubmissionStatus.REJECTED.value}
)
TERMINAL_PAYOUT_STATUSES = frozenset(
    {PayoutStatus.REJECTED.value, PayoutStatus.PAID.value}
)
# Payout amounts that have left the supplier's available balance
COMMITTED_PAYOUT_STATUSES = frozenset(
    {PayoutStatus.APPROVED.value, PayoutStatus.PAID.value}
)
