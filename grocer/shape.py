"""
Response shaping — pure transforms from raw API payloads to compact results.

Absent fields are left out of the output rather than set to None, so a
consumer never mistakes "not sent" for "explicitly empty".
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from grocer._types import Json, JsonObject

# ═══════════════════════════════════════════════════════════════════════════════
# Generic Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def compact(value: Any) -> Any:
    """Drop None-valued keys from mappings, recursively."""
    if isinstance(value, Mapping):
        return {k: compact(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [compact(v) for v in value]
    return value


def as_payload(obj: Any) -> Any:
    """Dataclass (or nested dataclasses) to plain JSON-ready data, compacted."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return compact(dataclasses.asdict(obj))
    return compact(obj)


def _obj(value: Json) -> JsonObject:
    return value if isinstance(value, dict) else {}


def _list(value: Json) -> list[Json]:
    return value if isinstance(value, list) else []


def pick(source: Json, fields: Mapping[str, str]) -> JsonObject:
    """Copy source[src] to out[dst] for every present, non-null field."""
    src = _obj(source)
    return {dst: src[key] for dst, key in fields.items() if src.get(key) is not None}


def format_timestamp(value: Json) -> str | None:
    """ISO-8601 to "YYYY-MM-DD HH:MM" for display."""
    if not isinstance(value, str) or not value:
        return None
    return value[:16].replace("T", " ")


# ═══════════════════════════════════════════════════════════════════════════════
# Pagination
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Page[T]:
    items: list[T]
    offset: int
    limit: int
    returned: int
    total: int
    has_more: bool

    def meta(self) -> dict[str, int | bool]:
        return {
            "offset": self.offset,
            "limit": self.limit,
            "returned": self.returned,
            "total": self.total,
            "hasMore": self.has_more,
        }


def paginate[T](items: Sequence[T], offset: int, limit: int) -> Page[T]:
    """Slice an already-fetched result."""
    window = list(items[offset : offset + limit])
    return Page(
        items=window,
        offset=offset,
        limit=limit,
        returned=len(window),
        total=len(items),
        has_more=offset + limit < len(items),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Products & Cart
# ═══════════════════════════════════════════════════════════════════════════════

_PRODUCT_FIELDS = {"id": "id", "name": "name", "price": "display_price", "unit": "unit_quantity"}


def product(raw: Json) -> JsonObject:
    """Search hit to {id, name, price, unit, image_id?}."""
    out = pick(raw, _PRODUCT_FIELDS)
    image_id = _obj(raw).get("image_id")
    if image_id:
        out["image_id"] = image_id
    return out


def _article(raw: Json) -> JsonObject:
    art = _obj(raw)
    out = pick(art, {"id": "id", "name": "name", "price": "price", "unit": "unit_quantity"})
    image_ids = _list(art.get("image_ids"))
    if image_ids and image_ids[0]:
        out["image_id"] = image_ids[0]
    return out


def flatten_cart(cart: Json) -> JsonObject:
    """
    Collapse order -> order lines -> articles into one flat article list.

    Cart totals are kept alongside.
    """
    body = _obj(cart)
    items = [
        _article(article)
        for line in _list(body.get("items"))
        for article in _list(_obj(line).get("items"))
    ]
    out: JsonObject = {"items": items}
    out.update(
        pick(
            body,
            {
                "total_count": "total_count",
                "total_price": "total_price",
                "checkout_total_price": "checkout_total_price",
                "total_savings": "total_savings",
            },
        )
    )
    return out


# ═══════════════════════════════════════════════════════════════════════════════
# Categories — Use-Case Profiles
# ═══════════════════════════════════════════════════════════════════════════════

type UseCase = Literal["browse", "search", "detailed"]

PROFILES: dict[str, tuple[str, ...]] = {
    "search": ("id", "name", "type"),
    "browse": ("id", "name", "type", "items_count"),
    "detailed": ("id", "name", "type", "level", "items_count", "items"),
}


def project_category(
    raw: Json,
    use_case: UseCase = "browse",
    *,
    depth: int = 0,
    include_images: bool = False,
) -> JsonObject:
    """Project one category onto the fields of a use-case profile."""
    category = _obj(raw)
    children = _list(category.get("items"))
    out: JsonObject = {}

    for name in PROFILES.get(use_case, PROFILES["browse"]):
        if name == "items_count":
            out["items_count"] = len(children)
        elif name == "items":
            if children and depth > 0:
                out["items"] = [pick(child, {"id": "id", "name": "name", "type": "type"}) for child in children[:3]]
        elif category.get(name) is not None:
            out[name] = category[name]

    if include_images and category.get("image_id"):
        out["image_id"] = category["image_id"]
    return out


def category_item(raw: Json, *, include_images: bool = False) -> JsonObject:
    """A category's child: either a sub-category or a product."""
    item = _obj(raw)
    if item.get("type") == "CATEGORY":
        out = pick(item, {"id": "id", "name": "name", "type": "type"})
        out["items_count"] = len(_list(item.get("items")))
    else:
        out = pick(item, {"id": "id", "name": "name", "type": "type", "price": "display_price", "unit": "unit_quantity"})
    if include_images and item.get("image_id"):
        out["image_id"] = item["image_id"]
    return out


# ═══════════════════════════════════════════════════════════════════════════════
# Delivery Slots
# ═══════════════════════════════════════════════════════════════════════════════


def delivery_slot(raw: Json) -> JsonObject:
    slot = _obj(raw)
    start = slot.get("window_start")
    end = slot.get("window_end")
    out = compact(
        {
            "slot_id": slot.get("slot_id"),
            "date": start[:10] if isinstance(start, str) else None,
            "start": start[11:16] if isinstance(start, str) else None,
            "end": end[11:16] if isinstance(end, str) else None,
            "cut_off": format_timestamp(slot.get("cut_off_time")),
        }
    )
    if slot.get("selected"):
        out["selected"] = True
    return out


def available_slots(raw_slots: Iterable[Json]) -> list[JsonObject]:
    return [delivery_slot(s) for s in raw_slots if _obj(s).get("is_available")]


__all__ = (
    "compact",
    "as_payload",
    "pick",
    "format_timestamp",
    "Page",
    "paginate",
    "product",
    "flatten_cart",
    "UseCase",
    "PROFILES",
    "project_category",
    "category_item",
    "delivery_slot",
    "available_slots",
)
