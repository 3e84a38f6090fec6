"""Per-entity mutation locks.

Commands that touch the same submission or the same account's payout history
are serialized through :class:`KeyedLock`; commands on unrelated keys run
freely. Keys are acquired in sorted order so two commands asking for the same
pair of keys can never deadlock.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


def account_key(account_id: str) -> str:
    return f"account:{account_id}"


def submission_key(submission_id: str) -> str:
    return f"submission:{submission_id}"


class KeyedLock:
    """A lazily-populated map of ``asyncio.Lock`` objects, one per key.

    Entries are dropped once nobody holds or waits on them, so the map only
    ever contains keys under active contention.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    async def _acquire(self, key: str) -> None:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._forget(key)
            raise

    def _release(self, key: str) -> None:
        self._locks[key].release()
        self._forget(key)

    def _forget(self, key: str) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        held: list[str] = []
        try:
            for key in sorted(set(keys)):
                await self._acquire(key)
                held.append(key)
            yield
        finally:
            for key in reversed(held):
                self._release(key)


# Process-wide lock table shared by all services
entity_locks = KeyedLock()
