"""Account router: registration, payout profile, deactivation, earnings, balance."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor, get_current_actor, get_optional_actor
from app.core.response import DataResponse
from app.db.base import get_db
from app.domain.enums import EntityType
from app.schemas.account import (
    AccountCreate,
    AccountOut,
    BalanceOut,
    CreditIn,
    DeactivateIn,
    EarningOut,
    PayoutProfileIn,
)
from app.schemas.audit import AuditEntryOut
from app.services.accounts import AccountService
from app.services.query import QueryService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=DataResponse[AccountOut], status_code=status.HTTP_201_CREATED)
async def register_account(
    body: AccountCreate,
    actor: Actor | None = Depends(get_optional_actor),
    session: AsyncSession = Depends(get_db),
):
    """Register a supplier (anyone) or an admin (admins only, except the first)."""
    account = await AccountService(session).register(body, actor)
    return {"data": AccountOut.model_validate(account)}


@router.get("/{account_id}", response_model=DataResponse[AccountOut])
async def get_account(
    account_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    account = await AccountService(session).get_account(actor, account_id)
    return {"data": AccountOut.model_validate(account)}


@router.put("/{account_id}/payout-profile", response_model=DataResponse[AccountOut])
async def update_payout_profile(
    account_id: str,
    body: PayoutProfileIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    account = await AccountService(session).update_payout_profile(actor, account_id, body)
    return {"data": AccountOut.model_validate(account)}


@router.post("/{account_id}/deactivate", response_model=DataResponse[AccountOut])
async def deactivate_account(
    account_id: str,
    body: DeactivateIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    account = await AccountService(session).deactivate(actor, account_id, body.reason)
    return {"data": AccountOut.model_validate(account)}


@router.post(
    "/{account_id}/credits",
    response_model=DataResponse[EarningOut],
    status_code=status.HTTP_201_CREATED,
)
async def credit_earnings(
    account_id: str,
    body: CreditIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    entry = await AccountService(session).credit_earnings(actor, account_id, body.amount, body.note)
    return {"data": EarningOut.model_validate(entry)}


@router.get("/{account_id}/earnings", response_model=DataResponse[list[EarningOut]])
async def list_earnings(
    account_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    entries = await AccountService(session).list_earnings(actor, account_id)
    return {"data": [EarningOut.model_validate(e) for e in entries]}


@router.get("/{account_id}/balance", response_model=DataResponse[BalanceOut])
async def get_balance(
    account_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await AccountService(session).balance(actor, account_id)}


@router.get("/{account_id}/history", response_model=DataResponse[list[AuditEntryOut]])
async def account_history(
    account_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
):
    entries = await QueryService(session).history(actor, EntityType.ACCOUNT, account_id)
    return {"data": [AuditEntryOut.model_validate(e) for e in entries]}
