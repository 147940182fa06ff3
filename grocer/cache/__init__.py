"""
Cache — TTL caching with single-flight refresh.

    from grocer import cache as C

    recipes = (
        C.cache(key_fn, fetch_fn)
        .tier(C.LocalTier(max_size=1))
        .policy(C.Policy(ttl=timedelta(minutes=5)))
        .build()
    )
    result = await recipes.get(path)
"""

from __future__ import annotations

from grocer.cache._types import (
    Clock,
    Entry,
    Policy,
    Tier,
    LocalTier,
    CacheResult,
)
from grocer.cache._builder import cache, Cache, CacheExecutor, DEFAULT_POLICY

__all__ = (
    "Clock",
    "Entry",
    "Policy",
    "Tier",
    "LocalTier",
    "CacheResult",
    "cache",
    "Cache",
    "CacheExecutor",
    "DEFAULT_POLICY",
)
