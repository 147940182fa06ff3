"""
Cache types.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Protocol

type Clock = Callable[[], float]
"""Monotonic seconds source."""

# ═══════════════════════════════════════════════════════════════════════════════
# Entry — Value + Fetch Timestamp
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Entry[T]:
    """Cached value with the clock reading taken when it was fetched."""

    value: T
    stored_at: float


# ═══════════════════════════════════════════════════════════════════════════════
# Policy — Freshness Window + Refresh Guard
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Cache policy.

    ttl: entries younger than this are served without fetching.
    single_flight: concurrent misses on one key share a single fetch.
    clock: time source, injectable for tests.

    Example:
        policy = Policy(ttl=timedelta(minutes=5))
    """

    ttl: timedelta
    single_flight: bool = True
    clock: Clock = field(default=time.monotonic)

    def is_fresh(self, entry: Entry[object], now: float) -> bool:
        return now - entry.stored_at < self.ttl.total_seconds()

    def remaining(self, entry: Entry[object], now: float) -> timedelta:
        left = self.ttl.total_seconds() - (now - entry.stored_at)
        return timedelta(seconds=max(0.0, left))


# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Tier[T](Protocol):
    """
    Cache tier protocol.

    Tiers only store entries; freshness is decided by the executor's Policy.
    """

    @property
    def name(self) -> str:
        """Tier name for debugging."""
        ...

    async def get(self, key: str) -> Entry[T] | None:
        """Get entry. Returns None on miss."""
        ...

    async def set(self, key: str, entry: Entry[T]) -> None:
        """Replace entry."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Local Tier — In-Memory LRU (Default)
# ═══════════════════════════════════════════════════════════════════════════════


class LocalTier[T]:
    """
    In-memory LRU cache tier.

    Example:
        tier = LocalTier[tuple[Recipe, ...]](max_size=1)
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._max_size = max_size
        self._cache: dict[str, Entry[T]] = {}

    @property
    def name(self) -> str:
        return "local"

    async def get(self, key: str) -> Entry[T] | None:
        entry = self._cache.pop(key, None)
        if entry is None:
            return None
        # Re-insert as most recent
        self._cache[key] = entry
        return entry

    async def set(self, key: str, entry: Entry[T]) -> None:
        if key in self._cache:
            del self._cache[key]
        elif len(self._cache) >= self._max_size:
            oldest = next(iter(self._cache))
            del self._cache[oldest]
        self._cache[key] = entry

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._cache)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Cache read result with metadata."""

    value: T
    hit: bool
    tier: str | None
    ttl_remaining: timedelta | None


__all__ = (
    "Clock",
    "Entry",
    "Policy",
    "Tier",
    "LocalTier",
    "CacheResult",
)
