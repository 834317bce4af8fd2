"""Snapshot cache and cached context service.

Caching lives outside the context builder: the builder stays pure and this
module wraps it. Entries expire after a TTL; once the cache reaches its size
limit, expired entries are swept and the oldest remaining entries evicted.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from coach_context.coach.context_builder import CoachingContextBuilder, ContextRequest
from coach_context.config.settings import settings
from coach_context.models.snapshot import ContextSnapshot


@dataclass(frozen=True)
class _CacheEntry:
    value: ContextSnapshot
    expires_at: float


class SnapshotCache:
    """In-process TTL cache keyed by string."""

    def __init__(
        self,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries if max_entries is not None else settings.cache_max_entries
        if self.max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {self.max_entries}")
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> ContextSnapshot | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            logger.debug(f"[CACHE] Expired entry dropped: {key}")
            return None
        logger.debug(f"[CACHE] Cache hit: {key}")
        return entry.value

    def put(self, key: str, value: ContextSnapshot, ttl: float) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._make_room()
        self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + ttl)
        self._entries.move_to_end(key)
        logger.debug(f"[CACHE] Cache set: {key} ttl={ttl}s")

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def sweep_expired(self) -> int:
        """Drop all expired entries; returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"[CACHE] Swept {len(expired)} expired entries")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def _make_room(self) -> None:
        self.sweep_expired()
        while len(self._entries) >= self.max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug(f"[CACHE] Evicted oldest entry: {key}")


def context_cache_key(user_id: str) -> str:
    return f"context:{user_id}"


class CachedContextService:
    """Serves snapshots from cache, building them on a miss.

    Only default requests (no pinned ``now``) are cached; a pinned ``now``
    always rebuilds.
    """

    def __init__(
        self,
        builder: CoachingContextBuilder,
        cache: SnapshotCache | None = None,
        ttl_seconds: float | None = None,
    ):
        self.builder = builder
        self.cache = cache if cache is not None else SnapshotCache()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds

    async def get_context(self, user_id: str, now: datetime | None = None) -> ContextSnapshot:
        request = ContextRequest(user_id=user_id, now=now)
        if now is not None:
            return await self.builder.build(request)

        key = context_cache_key(user_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        snapshot = await self.builder.build(request)
        self.cache.put(key, snapshot, self.ttl_seconds)
        return snapshot

    def invalidate(self, user_id: str) -> None:
        self.cache.delete(context_cache_key(user_id))
        logger.debug(f"[CACHE] Invalidated context for user_id={user_id}")
