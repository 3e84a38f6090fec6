"""Submission router: supplier uploads plus the admin review commands."""

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
from app.schemas.query import ListFilter
from app.schemas.submission import RejectIn, SubmissionCreate, SubmissionOut, VerifyIn
from app.services.query import QueryService
from app.services.review import ReviewService

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post("", response_model=DataResponse[SubmissionOut], status_code=status.HTTP_201_CREATED)
async def submit_documents(
    body: SubmissionCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    submission = await ReviewService(session).submit(
        actor, body.account_id, [d.model_dump() for d in body.documents]
    )
    return {"data": SubmissionOut.model_validate(submission)}


@router.get("", response_model=ListResponse[SubmissionOut])
async def list_submissions(
    statuses: list[str] | None = Query(default=None, alias="status"),
    account_id: str | None = Query(default=None, alias="accountId"),
    created_from: datetime | None = Query(default=None, alias="createdFrom"),
    created_to: datetime | None = Query(default=None, alias="createdTo"),
    pagination: PaginationParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    """List submissions. Repeat ?status= to match several statuses."""
    filters = ListFilter(
        statuses=statuses, account_id=account_id, created_from=created_from, created_to=created_to
    )
    page = await QueryService(session).list(
        actor, EntityType.SUBMISSION, filters, pagination.sort_spec(), pagination.page_request()
    )
    return paginated(page.items, page.total, page.page, page.limit, page.snapshot_id)


@router.get("/{submission_id}", response_model=DataResponse[SubmissionOut])
async def get_submission(
    submission_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    submission = await ReviewService(session).get_submission(actor, submission_id)
    return {"data": SubmissionOut.model_validate(submission)}


@router.get("/{submission_id}/history", response_model=DataResponse[list[AuditEntryOut]])
async def submission_history(
    submission_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    entries = await QueryService(session).history(actor, EntityType.SUBMISSION, submission_id)
    return {"data": [AuditEntryOut.model_validate(e) for e in entries]}


# ------------------------------------------------------------------
# Review commands (admin)
# ------------------------------------------------------------------

@router.post("/{submission_id}/claim", response_model=DataResponse[SubmissionOut])
async def claim_submission(
    submission_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    submission = await ReviewService(session).claim(actor, submission_id)
    return {"data": SubmissionOut.model_validate(submission)}


@router.post("/{submission_id}/verify", response_model=DataResponse[SubmissionOut])
async def verify_submission(
    submission_id: str,
    body: VerifyIn | None = None,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    notes = body.notes if body else None
    submission = await ReviewService(session).verify(actor, submission_id, notes)
    return {"data": SubmissionOut.model_validate(submission)}


@router.post("/{submission_id}/reject", response_model=DataResponse[SubmissionOut])
async def reject_submission(
    submission_id: str,
    body: RejectIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    submission = await ReviewService(session).reject(actor, submission_id, body.reason)
    return {"data": SubmissionOut.model_validate(submission)}


@router.post("/{submission_id}/release", response_model=DataResponse[SubmissionOut])
async def release_submission(
    submission_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    submission = await ReviewService(session).release(actor, submission_id)
    return {"data": SubmissionOut.model_validate(submission)}
