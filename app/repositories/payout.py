"""Payout request repository."""

from __future__ import annotations

from app.domain.payout import PayoutRequest
from app.repositories.base import BaseRepository


class PayoutRepository(BaseRepository[PayoutRequest]):
    model = PayoutRequest

    async def history_for_account(self, account_id: str) -> list[PayoutRequest]:
        """Every payout request ever made by *account_id*, re-read from the store."""
        return await self.query(PayoutRequest.account_id == account_id, fresh=True)
