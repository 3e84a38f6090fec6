"""Account and earnings-ledger repositories."""

from __future__ import annotations

from app.domain.account import Account, EarningEntry
from app.domain.enums import Role
from app.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    async def get_by_email(self, email: str) -> Account | None:
        rows = await self.query(Account.email == email.strip().lower())
        return rows[0] if rows else None

    async def admin_exists(self) -> bool:
        return await self.count(Account.role == Role.ADMIN.value) > 0


class EarningRepository(BaseRepository[EarningEntry]):
    model = EarningEntry

    async def for_account(self, account_id: str) -> list[EarningEntry]:
        return await self.query(EarningEntry.account_id == account_id)
