"""
Query cache for client-side server state

Entries are keyed by logical resource name ("posts", "users"). Data is fresh
for ``stale_time`` seconds after a fetch; invalidation marks it stale so the
next read refetches. Concurrent fetches of the same key share one in-flight
task.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from config.settings import QUERY_STALE_SECONDS

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[[str, "CacheEntry"], None]


@dataclass
class CacheEntry:
    data: Any = None
    fetched_at: Optional[float] = None
    invalidated: bool = False
    in_flight: Optional[asyncio.Task] = None
    # bumped by every invalidation; data_generation is the generation its fetch started in
    generation: int = 0
    data_generation: int = -1

    @property
    def has_data(self) -> bool:
        return self.fetched_at is not None


class QueryCache:
    """Explicit cache object; pass it to every query and mutation that shares data"""

    def __init__(self, stale_time: float = QUERY_STALE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._listeners: Dict[str, List[Listener]] = {}

    def _entry(self, key: str) -> CacheEntry:
        return self._entries.setdefault(key, CacheEntry())

    def get_data(self, key: str) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def is_stale(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None or not entry.has_data or entry.invalidated:
            return True
        return self._clock() - entry.fetched_at >= self.stale_time

    def set_data(self, key: str, data: Any):
        entry = self._entry(key)
        self._store(key, data, entry.generation)

    def _store(self, key: str, data: Any, generation: int):
        """Keep data fetched in ``generation``; it is fresh only if no invalidation happened since"""
        entry = self._entries[key]
        if generation < entry.data_generation:
            # a fetch started after ours has already landed
            return
        entry.data = data
        entry.fetched_at = self._clock()
        entry.data_generation = generation
        entry.invalidated = generation != entry.generation
        self._notify(key)

    async def fetch(self, key: str, fetcher: Fetcher, force: bool = False) -> Any:
        """
        Return data for ``key``, calling ``fetcher`` only when needed

        Args:
            key: Resource name
            fetcher: Coroutine function producing fresh data
            force: Ignore freshness and refetch

        Returns:
            The cached or freshly fetched data
        """
        entry = self._entry(key)

        if entry.in_flight is not None:
            return await asyncio.shield(entry.in_flight)

        if not force and not self.is_stale(key):
            return entry.data

        generation = entry.generation
        task = asyncio.ensure_future(fetcher())
        entry.in_flight = task
        try:
            data = await asyncio.shield(task)
        finally:
            if entry.in_flight is task:
                entry.in_flight = None

        self._store(key, data, generation)
        return data

    def invalidate(self, key: str):
        """
        Mark ``key`` stale; the next read refetches

        A fetch already in flight is detached: its result is kept but stays
        stale, and later reads start a new fetch instead of joining it.
        """
        entry = self._entries.get(key)
        if entry is None:
            return
        entry.generation += 1
        entry.in_flight = None
        entry.invalidated = True
        logger.debug(f"Invalidated query cache key: {key}")
        self._notify(key)

    def subscribe(self, key: str, callback: Listener) -> Callable[[], None]:
        """
        Call ``callback(key, entry)`` whenever data for ``key`` is set or invalidated

        Returns:
            A function that removes the subscription
        """
        listeners = self._listeners.setdefault(key, [])
        listeners.append(callback)

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def clear(self):
        self._entries.clear()

    def _notify(self, key: str):
        entry = self._entries[key]
        for callback in list(self._listeners.get(key, [])):
            callback(key, entry)
