"""
Core types for grocer.

Re-exports from kungfu + JSON aliases for the external API payloads.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Payload Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Json = dict[str, Json] | list[Json] | str | int | float | bool | None
"""Loosely-typed JSON value as returned by the grocery API."""

type JsonObject = dict[str, Json]
"""A JSON object with named optional fields."""

type Predicate = Callable[[Mapping[str, object]], bool]
"""Shape predicate over a mapping node."""

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Json",
    "JsonObject",
    "Predicate",
    "Lazy",
)
