"""
Chain — ordered steps where each one needs the previous step's output.

    from grocer import chain as C

    flow = C.step("read", read).then(lambda r: C.step("write", lambda: write(r)))
    result = await C.run(flow)
"""

from __future__ import annotations

from grocer.chain._types import (
    Step,
    Then,
    ChainExpr,
    ChainResult,
    ChainError,
)
from grocer.chain._run import step, run

__all__ = (
    "Step",
    "Then",
    "ChainExpr",
    "ChainResult",
    "ChainError",
    "step",
    "run",
)
