"""
Tree search — locate records by shape inside an untyped JSON tree.

    from grocer import tree

    recipes = tree.find_all(payload, tree.is_recipe_shaped)

The payload comes from an external page endpoint with no stable schema, so
records are matched by what they look like, not by where they sit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from grocer._types import Json, Predicate

log = logging.getLogger("grocer.tree")

DEFAULT_MAX_DEPTH = 64

# ═══════════════════════════════════════════════════════════════════════════════
# Shape Predicates
# ═══════════════════════════════════════════════════════════════════════════════


def is_recipe_shaped(node: Mapping[str, object]) -> bool:
    """Non-empty recipe identifier AND an ingredient sequence."""
    return bool(node.get("recipe_id")) and isinstance(node.get("ingredients"), list)


def has_id(target: str) -> Predicate:
    """Predicate matching nodes whose "id" equals target."""

    def match(node: Mapping[str, object]) -> bool:
        return node.get("id") == target

    return match


# ═══════════════════════════════════════════════════════════════════════════════
# find_all() — Depth-First Shape Match
# ═══════════════════════════════════════════════════════════════════════════════


def find_all(
    payload: Json,
    predicate: Predicate,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[dict[str, Json]]:
    """
    Collect every node satisfying predicate, depth-first.

    - Lists are walked in order, mappings in insertion order.
    - A matching node is a leaf: its children are not searched, so nested
      look-alikes (e.g. "related recipes" inside a recipe) are not counted.
    - Containers already seen (by identity) are skipped and nothing deeper
      than max_depth is visited, so a malformed payload cannot hang us.

    Returns [] when nothing matches.
    """
    found: list[dict[str, Json]] = []
    seen: set[int] = set()
    truncated = 0

    def visit(node: Json, depth: int) -> None:
        nonlocal truncated
        if not isinstance(node, (dict, list)):
            return
        if depth > max_depth:
            truncated += 1
            return
        if id(node) in seen:
            return
        seen.add(id(node))

        if isinstance(node, list):
            for child in node:
                visit(child, depth + 1)
        elif predicate(node):
            found.append(node)
        else:
            for child in node.values():
                visit(child, depth + 1)

    visit(payload, 0)

    if truncated:
        log.warning("Tree search stopped at depth %d in %d place(s)", max_depth, truncated)

    return found


def find_first(
    payload: Json,
    predicate: Predicate,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Json] | None:
    """First match in depth-first order, or None."""
    matches = find_all(payload, predicate, max_depth=max_depth)
    return matches[0] if matches else None


__all__ = (
    "DEFAULT_MAX_DEPTH",
    "is_recipe_shaped",
    "has_id",
    "find_all",
    "find_first",
)
