"""
Chain execution.

No rollback: a step that fails leaves earlier effects in place. Use this
only where the upstream protocol has no compensating call anyway.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kungfu import Result, Ok, Error, LazyCoroResult

from grocer.chain._types import (
    Step,
    Then,
    ChainExpr,
    ChainResult,
    ChainError,
)

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](name: str, action: Callable[[], Awaitable[Result[T, E]]]) -> Step[T, E]:
    """
    Create a named step from an async function returning Result.

    Example:
        read = C.step("read cart", lambda: read_cart(client))
        chain = read.then(lambda cart: C.step("start", lambda: start(cart)))
    """
    return Step(name=name, action=LazyCoroResult(action))


# ═══════════════════════════════════════════════════════════════════════════════
# run() — Execute Chain
# ═══════════════════════════════════════════════════════════════════════════════


async def _execute(
    expr: ChainExpr[object, object],
    trail: list[str],
) -> Result[object, ChainError[object]]:
    match expr:
        case Step(name=name, action=action):
            result = await action
            trail.append(name)
            match result:
                case Ok(value):
                    return Ok(value)
                case Error(e):
                    return Error(ChainError(error=e, step_failed=name, steps=tuple(trail)))
        case Then(inner=inner, f=f):
            first = await _execute(inner, trail)
            match first:
                case Ok(value):
                    return await _execute(f(value), trail)
                case Error(_):
                    return first
    raise TypeError(f"Not a chain expression: {expr!r}")


async def run[T, E](
    chain: ChainExpr[T, E],
) -> Result[ChainResult[T], ChainError[E]]:
    """
    Execute steps in order, feeding each Ok value into the next factory.

    Stops at the first Error.

    Example:
        result = await C.run(chain)

        match result:
            case Ok(r):
                print(f"Done after {r.steps_executed} steps")
            case Error(e):
                print(f"Failed at {e.step_failed}: {e.error}")
    """
    trail: list[str] = []
    result = await _execute(chain, trail)  # type: ignore[arg-type]
    match result:
        case Ok(value):
            return Ok(ChainResult(value=value, steps=tuple(trail)))  # type: ignore[arg-type]
        case Error(e):
            return Error(e)  # type: ignore[arg-type]


__all__ = ("step", "run")
