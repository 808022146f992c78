"""Release-pair cache for computed changelog entries.

Looking up tags is the expensive part of building a changelog, and the
entry for a given (previous, next) release pair never changes once
computed. The assembler therefore memoizes each entry for a while.

Design notes:
- Coded against a Protocol so the assembler can be handed any store
  (tests use a fresh MemoryCache with a fake clock)
- Values are opaque to the cache; callers store JSON-compatible dumps
- An expired entry is indistinguishable from one that was never set
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Protocol

from dep_changelog.logging_config import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class CacheProtocol(Protocol):
    """Interface for a namespaced key/value store with expiry."""

    async def get(self, namespace: str, key: str) -> Any | None:
        """Return the stored value, or None if absent or expired."""
        ...

    async def set(
        self, namespace: str, key: str, value: Any, ttl_minutes: int
    ) -> None:
        """Store a value that expires after ``ttl_minutes``."""
        ...


# ---------------------------------------------------------------------------
# In-memory Implementation
# ---------------------------------------------------------------------------


class MemoryCache:
    """Process-local cache backed by a dict.

    Usage:
        cache = MemoryCache()
        await cache.set("changelog-github-release", "npm:lodash:1.0.0:1.1.0", entry, 55)
        entry = await cache.get("changelog-github-release", "npm:lodash:1.0.0:1.1.0")
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 1024,
    ) -> None:
        """Initialize an empty cache.

        Args:
            clock: Returns the current time in seconds. Injected so tests
                   can move time forward without sleeping.
            sweep_threshold: Entry count at which set() drops expired entries
        """
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._next_sweep = sweep_threshold
        self._entries: dict[tuple[str, str], tuple[float, Any]] = {}

    async def get(self, namespace: str, key: str) -> Any | None:
        item = self._entries.get((namespace, key))
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            del self._entries[(namespace, key)]
            logger.debug("cache_entry_expired", namespace=namespace, key=key)
            return None
        return value

    async def set(
        self, namespace: str, key: str, value: Any, ttl_minutes: int
    ) -> None:
        now = self._clock()
        self._entries[(namespace, key)] = (now + ttl_minutes * 60, value)
        if len(self._entries) >= self._next_sweep:
            self._sweep(now)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        # Next sweep once the live set has doubled
        self._next_sweep = max(self._sweep_threshold, 2 * len(self._entries))
        logger.debug("cache_swept", removed=len(expired), remaining=len(self._entries))

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_default_cache: MemoryCache | None = None


def get_default_cache() -> MemoryCache:
    """Return the process-wide cache shared by all invocations."""
    global _default_cache
    if _default_cache is None:
        _default_cache = MemoryCache()
    return _default_cache
