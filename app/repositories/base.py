"""Generic async repository implementing the engine's store contract.

The services only ever use ``get``, ``put`` and ``query``; anything that can
answer those three calls (an in-memory fake, another database) can sit here
without changing engine logic.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic store over one ORM model.

    There is no delete: accounts are deactivated, submissions and payouts
    only change status.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        return select(self.model)

    def _ordering(self, order_by: str | ColumnElement[Any], order: str) -> list[Any]:
        col = getattr(self.model, order_by) if isinstance(order_by, str) else order_by
        primary = col.desc() if order == "desc" else col.asc()
        # Stable tie-break so equal sort keys always come back in the same order
        tie = self.model.id.desc() if order == "desc" else self.model.id.asc()
        return [primary, tie]

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, entity_id: str, *, for_update: bool = False) -> ModelT | None:
        """Fetch one row. ``for_update`` re-reads it even if already in the session."""
        q = self._base_query().where(self.model.id == entity_id)
        if for_update:
            # SQLite ignores FOR UPDATE; the per-entity lock covers it there
            q = q.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(q)
        return result.scalars().first()

    async def query(
        self,
        *criteria: ColumnElement[bool],
        order_by: str | ColumnElement[Any] = "created_at",
        order: str = "asc",
        fresh: bool = False,
    ) -> list[ModelT]:
        """Return every row matching all *criteria*, deterministically ordered."""
        q = self._base_query().where(*criteria).order_by(*self._ordering(order_by, order))
        if fresh:
            q = q.execution_options(populate_existing=True)
        items = (await self._session.execute(q)).scalars().all()
        return list(items)

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        q = self._base_query().where(*criteria)
        count_q = select(func.count()).select_from(q.subquery())
        return (await self._session.execute(count_q)).scalar_one()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def put(self, instance: ModelT) -> ModelT:
        """Stage a new or modified row; it is committed by the caller's unit of work."""
        self._session.add(instance)
        await self._session.flush()  # populate id / defaults
        return instance
