"""
Cache builder — fluent API.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from collections.abc import Callable
from datetime import timedelta

from kungfu import LazyCoroResult, Result, Ok, Error

from grocer.cache._types import (
    Tier,
    Entry,
    Policy,
    CacheResult,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Key Function Type
# ═══════════════════════════════════════════════════════════════════════════════

type KeyFn[K] = Callable[[K], str]

DEFAULT_POLICY = Policy(ttl=timedelta(minutes=5))


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class Cache[K, T, E]:
    """
    Fluent cache builder.

    Type parameters:
        K: Key input type
        T: Value type
        E: Error type from fetch

    Example:
        recipe_cache = (
            C.cache(lambda path: path, fetch_recipes)
            .tier(C.LocalTier(max_size=1))
            .policy(C.Policy(ttl=timedelta(minutes=5)))
            .build()
        )
    """

    _key_fn: KeyFn[K]
    _fetch: Callable[[K], LazyCoroResult[T, E]]
    _tiers: tuple[Tier[T], ...]
    _policy: Policy

    def tier(self, t: Tier[T]) -> Cache[K, T, E]:
        """Add cache tier."""
        return Cache(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _tiers=(*self._tiers, t),
            _policy=self._policy,
        )

    def policy(self, p: Policy) -> Cache[K, T, E]:
        """Set freshness policy."""
        return Cache(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _tiers=self._tiers,
            _policy=p,
        )

    def build(self) -> CacheExecutor[K, T, E]:
        """Build executable cache."""
        if not self._tiers:
            raise ValueError("tier() is required")
        return CacheExecutor(
            key_fn=self._key_fn,
            tiers=self._tiers,
            fetch=self._fetch,
            policy=self._policy,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Executor
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class CacheExecutor[K, T, E]:
    """Compiled cache executor."""

    key_fn: KeyFn[K]
    tiers: tuple[Tier[T], ...]
    fetch: Callable[[K], LazyCoroResult[T, E]]
    policy: Policy
    _inflight: dict[str, asyncio.Task[Result[CacheResult[T], E]]] = field(
        default_factory=dict
    )

    def get(self, key: K) -> LazyCoroResult[CacheResult[T], E]:
        """
        Get value from cache.

        Tries tiers in order; a stale entry counts as a miss. On a miss the
        fetch runs and its value replaces the entry in every tier.

        With policy.single_flight, callers missing on the same key while a
        fetch is running await that fetch instead of starting another.
        A fault raised by fetch reaches all of them.
        """
        cache_key = self.key_fn(key)

        async def execute() -> Result[CacheResult[T], E]:
            hit = await self._lookup(cache_key)
            if hit is not None:
                return Ok(hit)

            if not self.policy.single_flight:
                return await self._refresh(key, cache_key)

            pending = self._inflight.get(cache_key)
            if pending is None:
                pending = asyncio.ensure_future(self._refresh(key, cache_key))
                self._inflight[cache_key] = pending
                pending.add_done_callback(lambda _: self._inflight.pop(cache_key, None))
            return await asyncio.shield(pending)

        return LazyCoroResult(execute)

    async def _lookup(self, cache_key: str) -> CacheResult[T] | None:
        now = self.policy.clock()
        for t in self.tiers:
            entry = await t.get(cache_key)
            if entry is not None and self.policy.is_fresh(entry, now):
                return CacheResult(
                    value=entry.value,
                    hit=True,
                    tier=t.name,
                    ttl_remaining=self.policy.remaining(entry, now),
                )
        return None

    async def _refresh(self, key: K, cache_key: str) -> Result[CacheResult[T], E]:
        result = await self.fetch(key)
        match result:
            case Ok(value):
                entry = Entry(value=value, stored_at=self.policy.clock())
                # Replace wholesale, never mutate in place
                for t in self.tiers:
                    await t.set(cache_key, entry)
                return Ok(
                    CacheResult(
                        value=value,
                        hit=False,
                        tier=None,
                        ttl_remaining=self.policy.ttl,
                    )
                )
            case Error(e):
                return Error(e)

    def refreshing(self, key: K) -> bool:
        """True while a single-flight fetch for key is running."""
        return self.key_fn(key) in self._inflight

    async def invalidate(self, key: K) -> bool:
        """Invalidate key in all tiers."""
        cache_key = self.key_fn(key)
        deleted = False
        for t in self.tiers:
            if await t.delete(cache_key):
                deleted = True
        return deleted


# ═══════════════════════════════════════════════════════════════════════════════
# cache() — Entry Point (Type-Safe)
# ═══════════════════════════════════════════════════════════════════════════════


def cache[K, T, E](
    key: KeyFn[K],
    fetch: Callable[[K], LazyCoroResult[T, E]],
) -> Cache[K, T, E]:
    """
    Create cache builder with key function and fetch.

    The policy defaults to a five minute freshness window with single-flight
    refresh.

    Example:
        from grocer import cache as C

        page_cache = (
            C.cache(lambda path: path, fetch_page)
            .tier(C.LocalTier(max_size=10))
            .build()
        )

        result = await page_cache.get("/pages/meals-planner-root")
    """
    return Cache(
        _key_fn=key,
        _fetch=fetch,
        _tiers=(),
        _policy=DEFAULT_POLICY,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Cache", "CacheExecutor", "cache", "DEFAULT_POLICY")
