"""Payout lifecycle state machine.

    requested ──approve──▶ approved ──mark_paid──▶ paid   (terminal)
        └─────reject─────▶ rejected                       (terminal)

All payout commands for one account run under that account's lock. Balances
are recomputed from the full payout history inside the lock, both when a
request is created and again when it is approved, so two concurrent requests
can never jointly overdraw the account.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.core.config import settings
from app.core.exceptions import (
    IneligibleAccountError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from app.core.locks import KeyedLock, account_key, entity_locks
from app.db.base import atomic
from app.domain import rules
from app.domain.account import Account
from app.domain.enums import EntityType, PayoutStatus
from app.domain.mixins import utcnow
from app.domain.payout import PayoutRequest
from app.repositories.account import AccountRepository
from app.repositories.payout import PayoutRepository
from app.services.audit import AuditRecorder
from app.services.authorization import Action, enforce

logger = logging.getLogger(__name__)

_OUTCOMES = {
    PayoutStatus.APPROVED.value: Action.APPROVE_PAYOUT,
    PayoutStatus.REJECTED.value: Action.REJECT_PAYOUT,
}

class PayoutService:
    def __init__(self, session: AsyncSession, locks: KeyedLock = entity_locks):
        self._session = session
        self._locks = locks
        self._repo = PayoutRepository(session)
        self._accounts = AccountRepository(session)
        self._audit = AuditRecorder(session)

    async def _load(self, request_id: str, *, for_update: bool = False) -> PayoutRequest:
        payout = await self._repo.get(request_id, for_update=for_update)
        if not payout:
            raise NotFoundError("PayoutRequest", request_id)
        return payout

    async def _load_account(self, account_id: str) -> Account:
        account = await self._accounts.get(account_id, for_update=True)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    async def get_payout(self, actor: Actor, request_id: str) -> PayoutRequest:
        payout = await self._load(request_id)
        enforce(actor, Action.READ, payout)
        return payout

    # ------------------------------------------------------------------
    # Supplier command
    # ------------------------------------------------------------------

    async def request(self, actor: Actor, account_id: str | None, amount) -> PayoutRequest:
        """Open a payout request against the account's requestable balance."""
        account_id = account_id or actor.id
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                account = await self._load_account(account_id)
                enforce(actor, Action.REQUEST_PAYOUT, account)
                if not rules.is_verified(account):
                    raise IneligibleAccountError(account_id)

                payout = rules.new_payout_request(
                    account_id=account_id,
                    amount=amount,
                    payment_details=account.payout_profile,
                    min_amount=settings.min_payout_amount,
                )
                history = await self._repo.history_for_account(account_id)
                requestable = rules.requestable_balance(account, history)
                if payout.amount > requestable:
                    raise InsufficientBalanceError(payout.amount, requestable)

                await self._repo.put(payout)
                await self._audit.record(
                    EntityType.PAYOUT_REQUEST, payout.id, actor, None, payout.status
                )
        logger.info("Payout %s of %s requested by %s", payout.id, payout.amount, account_id)
        return payout

    # ------------------------------------------------------------------
    # Admin commands
    # ------------------------------------------------------------------

    async def decide(
        self, actor: Actor, request_id: str, outcome: str, reason: str | None = None
    ) -> PayoutRequest:
        action = _OUTCOMES.get(outcome)
        if action is None:
            raise ValidationError.single("outcome", "must be 'approved' or 'rejected'")
        if action == Action.REJECT_PAYOUT:
            reason = rules.require_reason("reason", reason)
        elif reason is not None:
            reason = reason.strip() or None

        account_id = (await self._load(request_id)).account_id
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                payout = await self._load(request_id, for_update=True)
                target = enforce(actor, action, payout)
                now = utcnow()

                if action == Action.APPROVE_PAYOUT:
                    account = await self._load_account(account_id)
                    history = await self._repo.history_for_account(account_id)
                    available = rules.available_balance(account, history)
                    if Decimal(payout.amount) > available:
                        logger.warning(
                            "Approval of %s refused: %s exceeds available %s",
                            request_id, payout.amount, available,
                        )
                        raise InsufficientBalanceError(Decimal(payout.amount), available)
                    payout.approved_at = now
                else:
                    payout.rejected_at = now

                prior = payout.status
                payout.status = target
                payout.decided_by = actor.id
                payout.decision_reason = reason
                await self._audit.record(
                    EntityType.PAYOUT_REQUEST, payout.id, actor, prior, target, reason
                )
        logger.info("Payout %s %s by %s", request_id, target, actor)
        return payout

    async def mark_paid(
        self, actor: Actor, request_id: str, external_reference: str | None
    ) -> PayoutRequest:
        reference = rules.require_reason("external_reference", external_reference)
        account_id = (await self._load(request_id)).account_id
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                payout = await self._load(request_id, for_update=True)
                target = enforce(actor, Action.MARK_PAID, payout)
                prior = payout.status
                payout.status = target
                payout.paid_by = actor.id
                payout.paid_at = utcnow()
                payout.external_reference = reference
                await self._audit.record(
                    EntityType.PAYOUT_REQUEST, payout.id, actor, prior, target, reference
                )
        logger.info("Payout %s paid by %s (ref %s)", request_id, actor, reference)
        return payout
