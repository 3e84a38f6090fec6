"""In-process store of frozen list results for snapshot pagination.

The first page of a listing materialises the whole filtered, sorted result
and parks it here; later pages slice the same tuple, so concurrent writes
between page fetches can neither duplicate nor skip an item.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable

from app.core.config import settings


@dataclass(frozen=True)
class Snapshot:
    id: str
    owner: str
    entity_type: str
    items: tuple[Any, ...]
    query: str = ""
    created: float = field(default_factory=time.monotonic)

    @property
    def total(self) -> int:
        return len(self.items)


class SnapshotStore:
    """Bounded, TTL-limited LRU of :class:`Snapshot` objects."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.snapshot_ttl_seconds
        self._max = max_entries if max_entries is not None else settings.snapshot_max_entries
        self._clock = clock
        self._entries: OrderedDict[str, Snapshot] = OrderedDict()
        self._mutex = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def create(
        self, owner: str, entity_type: str, items: list[Any], query: str = ""
    ) -> Snapshot:
        snap = Snapshot(
            id=uuid.uuid4().hex,
            owner=owner,
            entity_type=entity_type,
            items=tuple(items),
            query=query,
            created=self._clock(),
        )
        with self._mutex:
            self._purge()
            self._entries[snap.id] = snap
            while len(self._entries) > self._max:
                self._entries.popitem(last=False)
        return snap

    def get(self, snapshot_id: str) -> Snapshot | None:
        with self._mutex:
            self._purge()
            snap = self._entries.get(snapshot_id)
            if snap is not None:
                self._entries.move_to_end(snapshot_id)
            return snap

    def _purge(self) -> None:
        cutoff = self._clock() - self._ttl
        expired = [key for key, snap in self._entries.items() if snap.created < cutoff]
        for key in expired:
            del self._entries[key]


# Process-wide store shared by all query services
snapshot_store = SnapshotStore()
