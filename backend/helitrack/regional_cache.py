"""
regional_cache.py
~~~~~~~~~~~~~~~~~
Quantized regional cache in front of the active upstream adapter.

Nearby viewports share one upstream call: a viewport is reduced to a
*region key* (its center rounded to ``precision`` decimals) and, on a miss,
the adapter is asked for the whole *region cell* around that rounded
center – not the exact viewport. Clipping back to the viewport is
:mod:`viewport`'s job. The cell has a fixed radius, so a viewport wider
than the cell only gets the aircraft inside the cell (logged at DEBUG).

Concurrency
-----------
* Fresh hits are plain dict reads; they never wait on I/O.
* One upstream fetch per key at a time: concurrent misses on the same key
  await the same in-flight task and share its result (or its error).
* The shared task is shielded, so a client going away does not cancel a
  fetch other requests are waiting on; the result still lands in the cache.
* Failed fetches are not cached and leave any previous entry untouched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterator, NamedTuple

from .flight_record import FlightRecord
from .geo import BoundingBox, covers, region_cell, region_key
from .upstream import UpstreamAdapter

LOG = logging.getLogger("regional_cache")


class CacheEntry(NamedTuple):
    region_key: str
    fetched_at: float  # epoch seconds
    records: tuple[FlightRecord, ...]


class CacheStore:
    """Key → :class:`CacheEntry` map; entries are only ever replaced whole."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.region_key] = entry

    def prune(self, older_than: float) -> int:
        """Drop entries fetched before *older_than*; return how many went."""
        stale = [k for k, e in self._entries.items() if e.fetched_at < older_than]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


class RegionalCache:
    """TTL cache of per-region flight batches backed by one adapter."""

    def __init__(
        self,
        adapter: UpstreamAdapter,
        *,
        store: CacheStore | None = None,
        ttl: float = 30.0,
        precision: int = 1,
        radius_km: float = 50.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.adapter = adapter
        self.store = store if store is not None else CacheStore()
        self.ttl = ttl
        self.precision = precision
        self.radius_km = radius_km
        self._clock = clock
        self._inflight: dict[str, asyncio.Future[CacheEntry]] = {}

    def key_for(self, box: BoundingBox) -> str:
        return region_key(box, self.precision)

    def cell_for(self, box: BoundingBox) -> BoundingBox:
        return region_cell(box, self.precision, self.radius_km)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl

    def peek(self, box: BoundingBox) -> CacheEntry | None:
        """Fresh entry for *box*'s region, or ``None`` – never fetches."""
        entry = self.store.get(self.key_for(box))
        return entry if entry is not None and self.is_fresh(entry) else None

    async def get(self, box: BoundingBox) -> CacheEntry:
        """
        Return the entry for *box*'s region, fetching it when missing/stale.

        Raises:
            UpstreamError / ConfigError: propagated from the adapter.
        """
        key = self.key_for(box)
        entry = self.store.get(key)
        if entry is not None and self.is_fresh(entry):
            return entry

        task = self._inflight.get(key)
        if task is None:
            LOG.info("[cache] miss for region %s – fetching", key)
            cell = self.cell_for(box)
            if not covers(cell, box):
                LOG.debug(
                    "[cache] viewport %s extends past region cell %s; edges not fetched",
                    list(box),
                    list(cell),
                )
            task = asyncio.ensure_future(self._refresh(key, cell))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._settle(k, t))
        else:
            LOG.debug("[cache] joining in-flight fetch for region %s", key)
        return await asyncio.shield(task)

    async def _refresh(self, key: str, cell: BoundingBox) -> CacheEntry:
        result = await self.adapter.fetch(cell)
        # stamped on our own clock so TTL checks never mix time sources
        entry = CacheEntry(key, self._clock(), result.records)
        self.store.put(entry)
        LOG.info("[cache] stored %d flights for region %s", len(entry.records), key)
        return entry

    def _settle(self, key: str, task: asyncio.Future) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            LOG.warning("[cache] fetch for region %s failed: %s", key, task.exception())

    def sweep(self) -> int:
        """Evict entries past their TTL; safe to call from a background loop."""
        removed = self.store.prune(self._clock() - self.ttl)
        if removed:
            LOG.info("[cache] swept %d stale regions", removed)
        return removed


__all__ = ["CacheEntry", "CacheStore", "RegionalCache"]
