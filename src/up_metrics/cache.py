"""Short-lived in-memory cache for resolved metric values."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from .constants import DEFAULT_CACHE_CHECK_PERIOD, DEFAULT_CACHE_TTL
from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class ResultCache:
    """TTL cache of resolved values keyed by metric name.

    Only completed results are stored. Callers that miss concurrently each run
    their producer; there is no in-flight deduplication. A failing producer
    leaves the key empty.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        check_period: float = DEFAULT_CACHE_CHECK_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.check_period = check_period
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._last_sweep = clock()

    def get(self, key: str) -> Any | None:
        now = self._clock()
        self._maybe_sweep(now)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(now):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def remember(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        logger.debug("Cache miss for %s", key)
        value = await producer()
        if value is not None:
            self.set(key, value)
        return value

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.check_period:
            return
        self._last_sweep = now
        expired = [k for k, e in self._entries.items() if not e.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
