"""Named queue screens (review queue, payments, ...) over the query engine."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor, get_current_actor
from app.core.pagination import PaginationParams
from app.core.response import ListResponse, paginated
from app.db.base import get_db
from app.schemas.payout import PayoutOut
from app.schemas.submission import SubmissionOut
from app.services.query import VIEWS, QueryService

router = APIRouter(prefix="/views", tags=["Views"])


@router.get("", response_model=list[str])
async def list_views():
    return sorted(VIEWS)


@router.get("/{view_name}", response_model=ListResponse[SubmissionOut | PayoutOut])
async def get_view(
    view_name: str,
    account_id: str | None = Query(default=None, alias="accountId"),
    pagination: PaginationParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    """One page of a named view; the view's own sort applies unless overridden."""
    view = VIEWS.get(view_name)
    sort = pagination.sort_spec(view.sort) if view else None
    page = await QueryService(session).view(
        actor, view_name, sort, pagination.page_request(), account_id=account_id
    )
    return paginated(page.items, page.total, page.page, page.limit, page.snapshot_id)
