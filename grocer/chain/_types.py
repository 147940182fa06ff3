"""
Chain types — core data structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable
from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Step — Single Named Action
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Step[T, E]:
    """
    A single named step.

    The action runs when the chain reaches it. An Error stops the chain;
    a raised exception propagates out of run() untouched.
    """

    name: str
    action: LazyCoroResult[T, E]

    def then[U, E2](
        self,
        f: Callable[[T], Step[U, E2]],
    ) -> Then[T, U, E, E2]:
        """Chain another step fed with this step's value."""
        return Then(self, f)


# ═══════════════════════════════════════════════════════════════════════════════
# Chain AST — Sequential Composition
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Then[T, U, E, E2]:
    """Sequential composition (monadic bind)."""

    inner: Step[T, E] | Then[object, T, object, E]
    f: Callable[[T], Step[U, E2]]

    def then[V, E3](
        self,
        g: Callable[[U], Step[V, E3]],
    ) -> Then[U, V, E | E2, E3]:
        """Extend the chain."""
        return Then(self, g)


type ChainExpr[T, E] = Step[T, E] | Then[object, T, object, E]

# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ChainResult[T]:
    """Successful chain result with the names of the steps that ran."""

    value: T
    steps: tuple[str, ...]

    @property
    def steps_executed(self) -> int:
        return len(self.steps)


@dataclass(frozen=True, slots=True)
class ChainError[E]:
    """Chain error with the step that produced it."""

    error: E
    step_failed: str
    steps: tuple[str, ...]


__all__ = (
    "Step",
    "Then",
    "ChainExpr",
    "ChainResult",
    "ChainError",
)
