"""Authorization guard: the single table every command consults.

Two questions are kept apart so callers can tell "not allowed" from
"not possible":

* :func:`authorize`: may this actor perform this action on this entity at
  all?  Pure decision, returns :class:`Decision`.
* :func:`next_status`: is the action reachable from the entity's current
  status?  Raises :class:`InvalidTransitionError` when it is not.

:func:`enforce` runs both, in that order, and raises the matching error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.core.actor import Actor
from app.core.exceptions import AuthorizationError, InvalidTransitionError
from app.domain.account import Account
from app.domain.enums import EntityType, PayoutStatus, Role, SubmissionStatus
from app.domain.payout import PayoutRequest
from app.domain.submission import Submission


class Action(str, Enum):
    READ = "read"
    UPDATE_PROFILE = "account.update_profile"
    CREDIT_EARNINGS = "account.credit"
    DEACTIVATE = "account.deactivate"
    REGISTER_ADMIN = "account.register_admin"
    SUBMIT = "submission.create"
    CLAIM = "submission.claim"
    VERIFY = "submission.verify"
    REJECT = "submission.reject"
    RELEASE = "submission.release"
    REQUEST_PAYOUT = "payout.request"
    APPROVE_PAYOUT = "payout.approve"
    REJECT_PAYOUT = "payout.reject"
    MARK_PAID = "payout.mark_paid"


class Scope(str, Enum):
    OWN = "own"                  # entity must belong to the actor
    OWN_ACTIVE = "own_active"    # ... and the owning account must be active
    ANY = "any"
    REVIEW_LOCK = "review_lock"  # actor must hold the submission's review lock


PERMISSIONS: dict[tuple[Role, Action], Scope] = {
    # Supplier
    (Role.SUPPLIER, Action.READ): Scope.OWN,
    (Role.SUPPLIER, Action.UPDATE_PROFILE): Scope.OWN_ACTIVE,
    (Role.SUPPLIER, Action.SUBMIT): Scope.OWN_ACTIVE,
    (Role.SUPPLIER, Action.REQUEST_PAYOUT): Scope.OWN_ACTIVE,
    # Admin
    (Role.ADMIN, Action.READ): Scope.ANY,
    (Role.ADMIN, Action.CREDIT_EARNINGS): Scope.ANY,
    (Role.ADMIN, Action.DEACTIVATE): Scope.ANY,
    (Role.ADMIN, Action.REGISTER_ADMIN): Scope.ANY,
    (Role.ADMIN, Action.CLAIM): Scope.ANY,
    (Role.ADMIN, Action.VERIFY): Scope.REVIEW_LOCK,
    (Role.ADMIN, Action.REJECT): Scope.REVIEW_LOCK,
    (Role.ADMIN, Action.RELEASE): Scope.REVIEW_LOCK,
    (Role.ADMIN, Action.APPROVE_PAYOUT): Scope.ANY,
    (Role.ADMIN, Action.REJECT_PAYOUT): Scope.ANY,
    (Role.ADMIN, Action.MARK_PAID): Scope.ANY,
}

# action -> (statuses it may start from, status it leads to)
TRANSITIONS: dict[Action, tuple[frozenset[str], str]] = {
    Action.CLAIM: (
        frozenset({SubmissionStatus.PENDING.value}),
        SubmissionStatus.IN_REVIEW.value,
    ),
    Action.VERIFY: (
        frozenset({SubmissionStatus.IN_REVIEW.value}),
        SubmissionStatus.VERIFIED.value,
    ),
    Action.REJECT: (
        frozenset({SubmissionStatus.IN_REVIEW.value}),
        SubmissionStatus.REJECTED.value,
    ),
    Action.RELEASE: (
        frozenset({SubmissionStatus.IN_REVIEW.value}),
        SubmissionStatus.PENDING.value,
    ),
    Action.APPROVE_PAYOUT: (
        frozenset({PayoutStatus.REQUESTED.value}),
        PayoutStatus.APPROVED.value,
    ),
    Action.REJECT_PAYOUT: (
        frozenset({PayoutStatus.REQUESTED.value}),
        PayoutStatus.REJECTED.value,
    ),
    Action.MARK_PAID: (
        frozenset({PayoutStatus.APPROVED.value}),
        PayoutStatus.PAID.value,
    ),
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = Decision(True)


def denied(reason: str) -> Decision:
    return Decision(False, reason)


def entity_type_of(entity: Any) -> EntityType:
    if isinstance(entity, Account):
        return EntityType.ACCOUNT
    if isinstance(entity, Submission):
        return EntityType.SUBMISSION
    if isinstance(entity, PayoutRequest):
        return EntityType.PAYOUT_REQUEST
    raise TypeError(f"Unsupported entity {type(entity).__name__}")


def owner_of(entity: Any) -> str:
    if isinstance(entity, Account):
        return entity.id
    return entity.account_id


def authorize(
    actor: Actor, action: Action, entity: Any, *, owner: Account | None = None
) -> Decision:
    """Decide whether *actor* may apply *action* to *entity*.

    ``owner`` is the owning account when *entity* is not itself an account;
    it is only consulted for ``OWN_ACTIVE`` rules.
    """
    scope = PERMISSIONS.get((actor.role, action))
    if scope is None:
        return denied(f"{actor.role.value} may not {action.value}")

    if scope in (Scope.OWN, Scope.OWN_ACTIVE) and owner_of(entity) != actor.id:
        return denied(f"{action.value} is limited to your own {entity_type_of(entity).value}")

    if scope == Scope.OWN_ACTIVE:
        account = entity if isinstance(entity, Account) else owner
        if account is not None and not account.is_active:
            return denied("account is deactivated")

    if (
        scope == Scope.REVIEW_LOCK
        and entity.status == SubmissionStatus.IN_REVIEW.value
        and entity.reviewer_id != actor.id
    ):
        return denied("review lock is held by another admin")

    return ALLOWED


def next_status(action: Action, entity: Any) -> str:
    """Return the status *action* leads to, or raise if it is not reachable."""
    sources, target = TRANSITIONS[action]
    if entity.status not in sources:
        raise InvalidTransitionError(
            entity_type_of(entity).value, entity.id, entity.status, action.value
        )
    return target


def enforce(
    actor: Actor, action: Action, entity: Any, *, owner: Account | None = None
) -> str | None:
    """Raise ``AuthorizationError``/``InvalidTransitionError``; return the target status."""
    decision = authorize(actor, action, entity, owner=owner)
    if not decision:
        raise AuthorizationError(decision.reason)
    if action in TRANSITIONS:
        return next_status(action, entity)
    return None
