# context/cache.py
"""
Freshness-bounded cache.

One entry per key, each with an explicit expiry. Entries are replaced
whole on a successful load and never edited in place. A failed load
leaves whatever was cached before untouched, so stale data keeps serving
until a later refresh succeeds.

Concurrent misses for the same key are not deduplicated: every caller
that finds the key cold runs its own loader, and the last successful
result to complete is the one stored.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value with expiration."""

    value: T
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if cache entry has expired."""
        return now >= self.expires_at


class TTLCache:
    """
    Process-wide keyed cache with a default time-to-live.

    Args:
        name: Label used in logs and status output
        ttl_seconds: Default freshness window for stored values
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}
        self._lock = Lock()

    async def get(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Return the live value for key, loading it on a miss.

        Args:
            key: Cache key
            loader: Zero-arg coroutine function producing a fresh value
            ttl: Override for the default TTL of this cache

        Returns:
            The cached or freshly loaded value. When the loader fails and
            an expired entry exists, the expired value is returned.

        Raises:
            Whatever the loader raised, when nothing was cached before.
        """
        entry = self._entry(key)
        if entry is not None and not entry.is_expired(self._clock()):
            return entry.value

        try:
            value = await loader()
        except Exception as e:
            if entry is None:
                raise
            _logger.warning(
                f"[{self.name}] refresh of '{key}' failed ({e}); serving stale value"
            )
            return entry.value

        self.set(key, value, ttl)
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value for key, replacing any existing entry."""
        lifetime = self.ttl_seconds if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(
                value=value,
                expires_at=self._clock() + lifetime,
            )

    def peek(self, key: str) -> Optional[Any]:
        """Return the stored value for key, fresh or stale, without loading."""
        entry = self._entry(key)
        return entry.value if entry is not None else None

    def is_fresh(self, key: str) -> bool:
        entry = self._entry(key)
        return entry is not None and not entry.is_expired(self._clock())

    def reset(self, key: Optional[str] = None) -> None:
        """
        Drop cached data.

        Args:
            key: Specific key to clear, or None for all
        """
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def status(self) -> dict:
        """Get cache status for monitoring."""
        now = self._clock()
        with self._lock:
            return {
                key: {
                    "expires_in_seconds": round(entry.expires_at - now, 1),
                    "is_expired": entry.is_expired(now),
                }
                for key, entry in self._entries.items()
            }

    def _entry(self, key: str) -> Optional[CacheEntry[Any]]:
        with self._lock:
            return self._entries.get(key)
