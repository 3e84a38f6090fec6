"""Account service: registration, payout profile, deactivation, earnings feed.

Rule: No FastAPI here. Pure Python business logic over the repositories.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.locks import KeyedLock, account_key, entity_locks
from app.db.base import atomic
from app.domain import rules
from app.domain.account import Account, EarningEntry
from app.domain.enums import AccountStatus, EntityType, Role
from app.domain.mixins import utcnow
from app.repositories.account import AccountRepository, EarningRepository
from app.repositories.payout import PayoutRepository
from app.schemas.account import AccountCreate, BalanceOut, PayoutProfileIn
from app.services.audit import AuditRecorder
from app.services.authorization import Action, enforce

logger = logging.getLogger(__name__)

class AccountService:
    def __init__(self, session: AsyncSession, locks: KeyedLock = entity_locks):
        self._session = session
        self._locks = locks
        self._repo = AccountRepository(session)
        self._earnings = EarningRepository(session)
        self._payouts = PayoutRepository(session)
        self._audit = AuditRecorder(session)

    async def _load(self, account_id: str, *, for_update: bool = False) -> Account:
        account = await self._repo.get(account_id, for_update=for_update)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register(self, data: AccountCreate, actor: Actor | None = None) -> Account:
        """Create an account. Admin accounts need an admin actor, bar the very first."""
        account = rules.new_account(
            role=data.role, display_name=data.display_name, email=data.email, phone=data.phone
        )
        async with self._locks.hold("account-registry"):
            async with atomic(self._session):
                if account.is_admin and await self._repo.admin_exists():
                    if actor is None or actor.role != Role.ADMIN:
                        raise AuthorizationError("only an admin may register another admin")
                if await self._repo.get_by_email(account.email):
                    raise ValidationError.single("email", "is already registered")
                await self._repo.put(account)
                await self._audit.record(
                    EntityType.ACCOUNT,
                    account.id,
                    actor or Actor(account.id, Role(account.role)),
                    None,
                    account.status,
                )
        logger.info("Registered %s account %s", account.role, account.id)
        return account

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_account(self, actor: Actor, account_id: str) -> Account:
        account = await self._load(account_id)
        enforce(actor, Action.READ, account)
        return account

    async def list_earnings(self, actor: Actor, account_id: str) -> list[EarningEntry]:
        await self.get_account(actor, account_id)
        return await self._earnings.for_account(account_id)

    async def balance(self, actor: Actor, account_id: str) -> BalanceOut:
        account = await self.get_account(actor, account_id)
        history = await self._payouts.history_for_account(account_id)
        return BalanceOut(
            account_id=account.id,
            total_earned=Decimal(account.total_earned),
            committed=rules.committed_total(history),
            reserved=rules.reserved_total(history),
            available=rules.available_balance(account, history),
            requestable=rules.requestable_balance(account, history),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def update_payout_profile(
        self, actor: Actor, account_id: str, data: PayoutProfileIn
    ) -> Account:
        profile = rules.validate_payout_profile(data.model_dump(exclude_none=True))
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                account = await self._load(account_id, for_update=True)
                enforce(actor, Action.UPDATE_PROFILE, account)
                account.payout_profile = profile
        logger.info("Payout profile for %s set to %s", account_id, profile["method"])
        return account

    async def deactivate(self, actor: Actor, account_id: str, reason: str | None) -> Account:
        reason = rules.require_reason("reason", reason)
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                account = await self._load(account_id, for_update=True)
                enforce(actor, Action.DEACTIVATE, account)
                if not account.is_active:
                    return account
                prior = account.status
                account.status = AccountStatus.DEACTIVATED.value
                account.deactivated_at = utcnow()
                await self._audit.record(
                    EntityType.ACCOUNT, account.id, actor, prior, account.status, reason
                )
        logger.info("Account %s deactivated by %s", account_id, actor)
        return account

    async def credit_earnings(
        self, actor: Actor, account_id: str, amount, note: str | None = None
    ) -> EarningEntry:
        """Post an external earnings credit (the "total earned" feed)."""
        value = rules.parse_amount(amount)
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                account = await self._load(account_id, for_update=True)
                enforce(actor, Action.CREDIT_EARNINGS, account)
                if account.is_admin:
                    raise ValidationError.single("account_id", "earnings can only be credited to suppliers")
                entry = await post_earning(
                    self._earnings, account, value, source="manual", actor=actor, note=note
                )
        logger.info("Credited %s to %s by %s", value, account_id, actor)
        return entry


async def post_earning(
    earnings: EarningRepository,
    account: Account,
    amount: Decimal,
    *,
    source: str,
    actor: Actor,
    submission_id: str | None = None,
    note: str | None = None,
) -> EarningEntry:
    """Append a ledger credit and raise the account's running total.

    Caller holds the account lock and the surrounding unit of work.
    """
    entry = await earnings.put(
        EarningEntry(
            account_id=account.id,
            amount=amount,
            source=source,
            submission_id=submission_id,
            actor_id=actor.id,
            note=note,
        )
    )
    account.total_earned = Decimal(account.total_earned) + amount
    return entry
