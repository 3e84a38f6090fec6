"""Payout router: supplier requests plus admin decision and payment recording."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor, get_current_actor
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.domain.enums import EntityType
from app.schemas.audit import AuditEntryOut
from app.schemas.payout import DecisionIn, MarkPaidIn, PayoutCreate, PayoutOut
from app.schemas.query import ListFilter
from app.services.payouts import PayoutService
from app.services.query import QueryService

router = APIRouter(prefix="/payouts", tags=["Payouts"])


@router.post("", response_model=DataResponse[PayoutOut], status_code=status.HTTP_201_CREATED)
async def request_payout(
    body: PayoutCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    payout = await PayoutService(session).request(actor, body.account_id, body.amount)
    return {"data": PayoutOut.model_validate(payout)}


@router.get("", response_model=ListResponse[PayoutOut])
async def list_payouts(
    statuses: list[str] | None = Query(default=None, alias="status"),
    account_id: str | None = Query(default=None, alias="accountId"),
    created_from: datetime | None = Query(default=None, alias="createdFrom"),
    created_to: datetime | None = Query(default=None, alias="createdTo"),
    pagination: PaginationParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    filters = ListFilter(
        statuses=statuses, account_id=account_id, created_from=created_from, created_to=created_to
    )
    page = await QueryService(session).list(
        actor, EntityType.PAYOUT_REQUEST, filters, pagination.sort_spec(), pagination.page_request()
    )
    return paginated(page.items, page.total, page.page, page.limit, page.snapshot_id)


@router.get("/{request_id}", response_model=DataResponse[PayoutOut])
async def get_payout(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    payout = await PayoutService(session).get_payout(actor, request_id)
    return {"data": PayoutOut.model_validate(payout)}


@router.get("/{request_id}/history", response_model=DataResponse[list[AuditEntryOut]])
async def payout_history(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    entries = await QueryService(session).history(actor, EntityType.PAYOUT_REQUEST, request_id)
    return {"data": [AuditEntryOut.model_validate(e) for e in entries]}


@router.post("/{request_id}/decision", response_model=DataResponse[PayoutOut])
async def decide_payout(
    request_id: str,
    body: DecisionIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    """Approve or reject a requested payout. Rejection needs a reason."""
    payout = await PayoutService(session).decide(actor, request_id, body.outcome, body.reason)
    return {"data": PayoutOut.model_validate(payout)}


@router.post("/{request_id}/paid", response_model=DataResponse[PayoutOut])
async def mark_payout_paid(
    request_id: str,
    body: MarkPaidIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    payout = await PayoutService(session).mark_paid(actor, request_id, body.external_reference)
    return {"data": PayoutOut.model_validate(payout)}
