"""Domain package: all ORM models are imported here so create_all sees them.

Folder intent:
  account.py      Account identities and the append-only earnings ledger
  submission.py   Supplier batch submissions (review state machine)
  payout.py       Payout requests (payout state machine)
  audit.py        Immutable transition audit trail (never updated or deleted)
  enums.py        Status / role vocabularies
  rules.py        Validating constructors and pure balance predicates
  mixins.py       Shared id / timestamp columns
"""

from app.domain.account import Account, EarningEntry
from app.domain.audit import AuditEntry
from app.domain.payout import PayoutRequest
from app.domain.submission import Submission

__all__ = [
    "Account",
    "AuditEntry",
    "EarningEntry",
    "PayoutRequest",
    "Submission",
]
