"""Compiled graph cache.

Compiling a graph wires nodes, tools and ports together, so compiled graphs are
memoized by a caller-supplied key such as f"{connection_id}_{graph_id}". The
cache is owned by one orchestration service instance; it is not module state.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, Generic, List, Optional, TypeVar, Union

from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.CACHE)

T = TypeVar("T")

class GraphCache(Generic[T]):
    """Concurrency-safe key to compiled object map.

    `get_or_create` holds a per-key lock while a missing entry is built, so
    concurrent first access to the same key compiles once while other keys
    build independently.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, T] = {}
        self._lock = asyncio.Lock()
        self._key_locks: Dict[str, asyncio.Lock] = {}

    async def _lock_for(self, key: str) -> asyncio.Lock:
        async with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = asyncio.Lock()
            return lock

    def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    async def get_or_create(self, key: str, factory: Callable[[], Union[T, Awaitable[T]]]) -> T:
        """Return the cached entry for `key`, building it with `factory` if absent."""
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"Cache hit: {key}")
            return entry

        async with await self._lock_for(key):
            entry = self._entries.get(key)
            if entry is not None:
                return entry
            logger.info(f"Cache miss, building: {key}")
            entry = factory()
            if inspect.isawaitable(entry):
                entry = await entry
            self._entries[key] = entry
            return entry

    def put(self, key: str, entry: T) -> None:
        self._entries[key] = entry
        logger.debug(f"Cached: {key}")

    def invalidate(self, key: str) -> bool:
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.info(f"Invalidated cache entry: {key}")
        return removed

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with `prefix`; returns the count."""
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        logger.info(f"Invalidated {len(stale)} cache entries with prefix '{prefix}'")
        return len(stale)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared {count} cache entries")

    def keys(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
