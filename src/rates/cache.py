"""Read-through TTL cache for award and rate lookups.

One instance is built at startup and handed to the repository; there is no
module-level cache. Concurrent misses for the same key share a single
in-flight producer call, so a burst of identical queries costs one upstream
request. A producer that raises is never cached: the error reaches every
caller waiting on it and the next call starts a fresh attempt.
"""

import asyncio
import inspect
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3600.0


class CacheEntry(NamedTuple):
    key: str
    value: Any
    inserted_at: float


class CacheStats(NamedTuple):
    size: int
    hits: int
    misses: int
    coalesced: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


def _encode(value: Any) -> Any:
    """JSON fallback for the parameter types used in cache keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Cannot use {type(value).__name__} in a cache key")


def make_key(namespace: str, **params: Any) -> str:
    """Deterministic cache key for a query.

    Parameters are serialised as JSON with sorted keys at every level, so
    ``make_key("rates", a=1, b=2) == make_key("rates", b=2, a=1)``.
    """
    if not params:
        return namespace
    encoded = json.dumps(params, sort_keys=True, separators=(",", ":"), default=_encode)
    return f"{namespace}:{encoded}"


class RateCache:
    """In-memory TTL cache with request coalescing and an optional size bound."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._in_flight: dict[str, asyncio.Future[Any]] = {}
        self._hits = 0
        self._misses = 0
        self._coalesced = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.inserted_at < self.ttl_seconds

    def get(self, key: str) -> Any | None:
        """Return a live value without computing it, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` with the current timestamp."""
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key, value, self._clock())
        self._evict()

    def _evict(self) -> None:
        if self.max_entries is None or len(self._entries) <= self.max_entries:
            return
        for key in [k for k, e in self._entries.items() if not self._is_fresh(e)]:
            del self._entries[key]
        while len(self._entries) > self.max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", key)

    async def get_or_compute(self, key: str, producer: Callable[[], Awaitable[T] | T]) -> T:
        """Return the cached value for ``key``, computing it with ``producer`` on a miss.

        Args:
            key: Cache key, usually from ``make_key``.
            producer: Zero-argument callable returning the value or an awaitable of it.

        Returns:
            The cached or freshly produced value.

        Raises:
            Whatever ``producer`` raises. Nothing is cached in that case.
        """
        entry = self._entries.get(key)
        if entry is not None:
            if self._is_fresh(entry):
                self._hits += 1
                logger.debug("Cache hit: %s", key)
                return entry.value
            del self._entries[key]

        pending = self._in_flight.get(key)
        if pending is not None:
            self._coalesced += 1
            logger.debug("Joining in-flight fetch: %s", key)
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # The owning caller was cancelled, not us: start over.
                if pending.cancelled():
                    return await self.get_or_compute(key, producer)
                raise

        self._misses += 1
        logger.debug("Cache miss, fetching: %s", key)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = producer()
            if inspect.isawaitable(value):
                value = await value
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            logger.debug("Producer failed for %s: %s", key, e)
            future.set_exception(e)
            future.exception()  # mark retrieved when nobody else is waiting
            raise
        else:
            self.set(key, value)
            future.set_result(value)
            return value
        finally:
            self._in_flight.pop(key, None)

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Invalidated cache entry %s", key)
        return removed

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug("Invalidated %d cache entries with prefix %s", len(keys), prefix)
        return len(keys)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.debug("Cleared %d cache entries", count)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            coalesced=self._coalesced,
        )
