"""Query/filter engine behind the queue screens and list endpoints.

``list`` serves filtered, sorted, paginated views over submissions and payout
requests. The first page freezes the complete result into a snapshot; later
pages that quote its ``snapshot_id`` read the frozen copy, so a full sweep is
consistent even while reviewers keep working. Leaving the id out always
recomputes a fresh view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import ColumnElement, case
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.domain.audit import AuditEntry
from app.domain.enums import EntityType, PayoutStatus, SubmissionStatus
from app.domain.payout import PayoutRequest
from app.domain.submission import Submission
from app.repositories.account import AccountRepository
from app.repositories.base import BaseRepository
from app.repositories.payout import PayoutRepository
from app.repositories.submission import SubmissionRepository
from app.schemas.payout import PayoutOut
from app.schemas.query import ListFilter, PageRequest, SortSpec
from app.schemas.submission import SubmissionOut
from app.services.audit import AuditRecorder
from app.services.authorization import Action, enforce
from app.services.snapshots import SnapshotStore, snapshot_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Listing:
    model: Any
    repository: type[BaseRepository]
    schema: Any
    statuses: type[Enum]


_LISTINGS: dict[EntityType, _Listing] = {
    EntityType.SUBMISSION: _Listing(Submission, SubmissionRepository, SubmissionOut, SubmissionStatus),
    EntityType.PAYOUT_REQUEST: _Listing(PayoutRequest, PayoutRepository, PayoutOut, PayoutStatus),
}


@dataclass(frozen=True)
class View:
    """A named queue screen: a fixed status filter plus a default sort."""

    name: str
    entity_type: EntityType
    statuses: tuple[str, ...]
    sort: SortSpec


VIEWS: dict[str, View] = {
    view.name: view
    for view in (
        View(
            "review-queue",
            EntityType.SUBMISSION,
            (SubmissionStatus.PENDING.value, SubmissionStatus.IN_REVIEW.value),
            SortSpec(field="created_at", order="asc"),  # FIFO fairness
        ),
        View(
            "verified",
            EntityType.SUBMISSION,
            (SubmissionStatus.VERIFIED.value,),
            SortSpec(field="created_at", order="desc"),
        ),
        View(
            "rejected",
            EntityType.SUBMISSION,
            (SubmissionStatus.REJECTED.value,),
            SortSpec(field="created_at", order="desc"),
        ),
        View(
            "payout-requests",
            EntityType.PAYOUT_REQUEST,
            (PayoutStatus.REQUESTED.value, PayoutStatus.APPROVED.value),
            SortSpec(field="created_at", order="asc"),
        ),
        View(
            "payments",
            EntityType.PAYOUT_REQUEST,
            (PayoutStatus.PAID.value,),
            SortSpec(field="created_at", order="desc"),
        ),
    )
}


@dataclass
class Page:
    items: list[Any]
    total: int
    page: int
    limit: int
    snapshot_id: str


class QueryService:
    def __init__(self, session: AsyncSession, snapshots: SnapshotStore = snapshot_store):
        self._session = session
        self._snapshots = snapshots

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list(
        self,
        actor: Actor,
        entity_type: EntityType,
        filters: ListFilter | None = None,
        sort: SortSpec | None = None,
        page: PageRequest | None = None,
    ) -> Page:
        """Return one page plus the total of the whole (unpaged) result.

        A ``page.snapshot_id`` is only honoured for the same owner, entity
        type, filters and sort that produced it; later pages must repeat the
        query of the first one.
        """
        listing = _LISTINGS.get(entity_type)
        if listing is None:
            raise ValidationError.single("entity_type", f"cannot list {entity_type.value}")
        page = page or PageRequest()
        filters = self._scope(actor, filters or ListFilter())
        sort = sort or SortSpec()
        query = f"{filters.model_dump_json()}|{sort.model_dump_json()}"

        if page.snapshot_id:
            snap = self._snapshots.get(page.snapshot_id)
            if snap is None or snap.owner != actor.id or snap.entity_type != entity_type.value:
                raise ValidationError.single("snapshot", "is unknown or has expired")
            if snap.query != query:
                raise ValidationError.single("snapshot", "was taken for a different query")
        else:
            rows = await listing.repository(self._session).query(
                *self._criteria(listing, filters),
                order_by=self._sort_key(listing, sort),
                order=sort.order,
            )
            snap = self._snapshots.create(
                actor.id,
                entity_type.value,
                [listing.schema.model_validate(row) for row in rows],
                query,
            )
            logger.debug(
                "Snapshot %s: %d %s rows for %s", snap.id, snap.total, entity_type.value, actor
            )

        window = snap.items[page.offset : page.offset + page.limit]
        return Page(
            items=list(window),
            total=snap.total,
            page=page.page,
            limit=page.limit,
            snapshot_id=snap.id,
        )

    async def view(
        self,
        actor: Actor,
        name: str,
        sort: SortSpec | None = None,
        page: PageRequest | None = None,
        account_id: str | None = None,
    ) -> Page:
        view = VIEWS.get(name)
        if view is None:
            raise NotFoundError("View", name)
        filters = ListFilter(statuses=list(view.statuses), account_id=account_id)
        return await self.list(actor, view.entity_type, filters, sort or view.sort, page)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def history(
        self, actor: Actor, entity_type: EntityType, entity_id: str
    ) -> list[AuditEntry]:
        repositories = {
            EntityType.ACCOUNT: AccountRepository,
            EntityType.SUBMISSION: SubmissionRepository,
            EntityType.PAYOUT_REQUEST: PayoutRepository,
        }
        entity = await repositories[entity_type](self._session).get(entity_id)
        if entity is None:
            raise NotFoundError(entity_type.value, entity_id)
        enforce(actor, Action.READ, entity)
        return await AuditRecorder(self._session).history(entity_type, entity_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _scope(actor: Actor, filters: ListFilter) -> ListFilter:
        """Suppliers only ever see their own rows."""
        if actor.is_admin:
            return filters
        if filters.account_id and filters.account_id != actor.id:
            raise AuthorizationError("suppliers may only list their own records")
        return filters.model_copy(update={"account_id": actor.id})

    @staticmethod
    def _criteria(listing: _Listing, filters: ListFilter) -> list[ColumnElement[bool]]:
        model = listing.model
        criteria: list[ColumnElement[bool]] = []
        errors: dict[str, list[str]] = {}

        if filters.statuses:
            known = {s.value for s in listing.statuses}
            unknown = sorted(set(filters.statuses) - known)
            if unknown:
                errors["statuses"] = [f"unknown status: {s}" for s in unknown]
            criteria.append(model.status.in_(filters.statuses))
        if filters.account_id:
            criteria.append(model.account_id == filters.account_id)
        if filters.created_from and filters.created_to and filters.created_from > filters.created_to:
            errors["created_from"] = ["must not be after created_to"]
        if filters.created_from:
            criteria.append(model.created_at >= filters.created_from)
        if filters.created_to:
            criteria.append(model.created_at <= filters.created_to)

        if errors:
            raise ValidationError(errors)
        return criteria

    @staticmethod
    def _sort_key(listing: _Listing, sort: SortSpec) -> str | ColumnElement[Any]:
        if sort.field != "status":
            return sort.field
        # Lifecycle order rather than alphabetical
        ranks = {status.value: rank for rank, status in enumerate(listing.statuses)}
        return case(ranks, value=listing.model.status, else_=len(ranks))
