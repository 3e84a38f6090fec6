"""Submission review state machine.

    pending ──claim──▶ in_review ──verify──▶ verified   (terminal)
       ▲                   │      ──reject──▶ rejected   (terminal)
       └──────release──────┘

Every command runs under the submission's lock (plus the owning account's
lock when it touches the account) and inside one unit of work, so the status
change, reviewer fields, account flip, earnings credit and AuditEntry commit
together or not at all.

Rule: No FastAPI here. Pure Python business logic over the repositories.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.core.config import settings
from app.core.exceptions import AlreadyClaimedError, AuthorizationError, NotFoundError
from app.core.locks import KeyedLock, account_key, entity_locks, submission_key
from app.db.base import atomic
from app.domain import rules
from app.domain.account import Account
from app.domain.enums import EntityType, SubmissionStatus, VerificationStatus
from app.domain.mixins import utcnow
from app.domain.submission import Submission
from app.repositories.account import AccountRepository, EarningRepository
from app.repositories.submission import SubmissionRepository
from app.services.accounts import post_earning
from app.services.audit import AuditRecorder
from app.services.authorization import Action, authorize, enforce, next_status

logger = logging.getLogger(__name__)

class ReviewService:
    def __init__(self, session: AsyncSession, locks: KeyedLock = entity_locks):
        self._session = session
        self._locks = locks
        self._repo = SubmissionRepository(session)
        self._accounts = AccountRepository(session)
        self._earnings = EarningRepository(session)
        self._audit = AuditRecorder(session)

    async def _load(self, submission_id: str, *, for_update: bool = False) -> Submission:
        submission = await self._repo.get(submission_id, for_update=for_update)
        if not submission:
            raise NotFoundError("Submission", submission_id)
        return submission

    async def _load_account(self, account_id: str, *, for_update: bool = False) -> Account:
        account = await self._accounts.get(account_id, for_update=for_update)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_submission(self, actor: Actor, submission_id: str) -> Submission:
        submission = await self._load(submission_id)
        enforce(actor, Action.READ, submission)
        return submission

    # ------------------------------------------------------------------
    # Supplier command
    # ------------------------------------------------------------------

    async def submit(
        self,
        actor: Actor,
        account_id: str | None,
        documents: Iterable[Mapping[str, Any]],
    ) -> Submission:
        account_id = account_id or actor.id
        submission = rules.new_submission(
            account_id=account_id,
            documents=documents,
            max_documents=settings.max_documents_per_submission,
        )
        async with self._locks.hold(account_key(account_id)):
            async with atomic(self._session):
                account = await self._load_account(account_id, for_update=True)
                enforce(actor, Action.SUBMIT, account)
                await self._repo.put(submission)
                await self._audit.record(
                    EntityType.SUBMISSION, submission.id, actor, None, submission.status
                )
        logger.info(
            "Submission %s (%d documents) received from %s",
            submission.id, submission.document_count, account_id,
        )
        return submission

    # ------------------------------------------------------------------
    # Admin commands
    # ------------------------------------------------------------------

    async def claim(self, actor: Actor, submission_id: str) -> Submission:
        """Take the review lock. Re-claiming your own lock is a no-op."""
        async with self._locks.hold(submission_key(submission_id)):
            async with atomic(self._session):
                submission = await self._load(submission_id, for_update=True)
                decision = authorize(actor, Action.CLAIM, submission)
                if not decision:
                    raise AuthorizationError(decision.reason)
                if submission.status == SubmissionStatus.IN_REVIEW.value:
                    if submission.reviewer_id == actor.id:
                        return submission
                    logger.info(
                        "Claim on %s by %s refused: held by %s",
                        submission_id, actor, submission.reviewer_id,
                    )
                    raise AlreadyClaimedError(submission_id, submission.reviewer_id)
                target = next_status(Action.CLAIM, submission)
                prior = submission.status
                submission.status = target
                submission.reviewer_id = actor.id
                submission.claimed_at = utcnow()
                await self._audit.record(
                    EntityType.SUBMISSION, submission.id, actor, prior, target
                )
        logger.info("Submission %s claimed by %s", submission_id, actor)
        return submission

    async def verify(
        self, actor: Actor, submission_id: str, notes: str | None = None
    ) -> Submission:
        """Close the review as verified; the owning account becomes payout-eligible."""
        owner_id = (await self._load(submission_id)).account_id
        async with self._locks.hold(submission_key(submission_id), account_key(owner_id)):
            async with atomic(self._session):
                submission = await self._load(submission_id, for_update=True)
                target = enforce(actor, Action.VERIFY, submission)
                account = await self._load_account(submission.account_id, for_update=True)

                now = utcnow()
                prior = submission.status
                submission.status = target
                submission.verified_at = now
                submission.review_notes = notes.strip() if notes and notes.strip() else None

                if account.verification_status != VerificationStatus.VERIFIED.value:
                    account.verification_status = VerificationStatus.VERIFIED.value
                    account.verified_at = now

                credit = self._earning_for(submission)
                if credit > 0:
                    await post_earning(
                        self._earnings,
                        account,
                        credit,
                        source="submission_verified",
                        actor=actor,
                        submission_id=submission.id,
                    )
                await self._audit.record(
                    EntityType.SUBMISSION, submission.id, actor, prior, target, notes
                )
        logger.info(
            "Submission %s verified by %s (credited %s to %s)",
            submission_id, actor, credit, owner_id,
        )
        return submission

    async def reject(self, actor: Actor, submission_id: str, reason: str | None) -> Submission:
        reason = rules.require_reason("reason", reason)
        async with self._locks.hold(submission_key(submission_id)):
            async with atomic(self._session):
                submission = await self._load(submission_id, for_update=True)
                target = enforce(actor, Action.REJECT, submission)
                prior = submission.status
                submission.status = target
                submission.rejection_reason = reason
                submission.rejected_at = utcnow()
                await self._audit.record(
                    EntityType.SUBMISSION, submission.id, actor, prior, target, reason
                )
        logger.info("Submission %s rejected by %s: %s", submission_id, actor, reason)
        return submission

    async def release(self, actor: Actor, submission_id: str) -> Submission:
        """Give up the review lock and put the submission back in the queue."""
        async with self._locks.hold(submission_key(submission_id)):
            async with atomic(self._session):
                submission = await self._load(submission_id, for_update=True)
                target = enforce(actor, Action.RELEASE, submission)
                prior = submission.status
                submission.status = target
                submission.reviewer_id = None
                submission.released_at = utcnow()
                await self._audit.record(
                    EntityType.SUBMISSION, submission.id, actor, prior, target
                )
        logger.info("Submission %s released by %s", submission_id, actor)
        return submission

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _earning_for(submission: Submission) -> Decimal:
        return sum(
            (settings.rate_for(doc["kind"]) for doc in submission.documents),
            Decimal("0"),
        )
