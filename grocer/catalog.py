"""
Catalog, cart and delivery operations.

Thin shaping over the grocery API: fetch, trim to the fields an agent needs,
paginate. Collaborator faults propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from combinators import parallel as C_parallel, lift as L
from kungfu import Result, Ok, Error

from grocer import shape, tree
from grocer._types import Json, JsonObject
from grocer.client import GroceryClient
from grocer.config import Settings, get_settings
from grocer.errors import NotFound

log = logging.getLogger("grocer.catalog")

CATEGORY_HINT = "Use categories() to find valid category IDs."
MAX_LIST_DEPTH = 5


@dataclass(frozen=True, slots=True)
class SearchPage:
    query: str
    page: shape.Page[JsonObject]


@dataclass(frozen=True, slots=True)
class SearchQuery:
    query: str
    limit: int = 3


@dataclass(frozen=True, slots=True)
class SearchBatch:
    query: str
    results: list[JsonObject]
    total: int


def _catalog_of(categories: Json) -> list[Json]:
    catalog = categories.get("catalog") if isinstance(categories, dict) else None
    return catalog if isinstance(catalog, list) else []


class Catalog:
    def __init__(self, client: GroceryClient, *, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = get_settings() if settings is None else settings

    # ───────────────────────────────────────────────────────────────────────
    # Search
    # ───────────────────────────────────────────────────────────────────────

    async def search(self, query: str, *, limit: int | None = None, offset: int = 0) -> SearchPage:
        limit = limit if limit is not None else self._settings.search_limit
        hits = await self._client.search(query)
        page = shape.paginate(hits, offset, limit)
        return SearchPage(
            query=query,
            page=shape.Page(
                items=[shape.product(p) for p in page.items],
                offset=page.offset,
                limit=page.limit,
                returned=page.returned,
                total=page.total,
                has_more=page.has_more,
            ),
        )

    async def _search_batch(self, q: SearchQuery) -> SearchBatch:
        hits = await self._client.search(q.query)
        return SearchBatch(
            query=q.query,
            results=[shape.product(p) for p in hits[: q.limit]],
            total=len(hits),
        )

    async def search_many(self, queries: Sequence[SearchQuery]) -> list[SearchBatch]:
        """Run several searches concurrently; results keep the order of queries."""
        ops = [
            L.catching_async(lambda q=q: self._search_batch(q), on_error=lambda e: e)
            for q in queries
        ]
        result = await C_parallel(*ops)
        match result:
            case Ok(batches):
                return list(batches)
            case Error(e):
                log.warning("Batch search failed: %s", e)
                raise e

    # ───────────────────────────────────────────────────────────────────────
    # Categories
    # ───────────────────────────────────────────────────────────────────────

    async def categories(
        self,
        *,
        depth: int = 0,
        limit: int | None = None,
        include_images: bool = False,
        use_case: shape.UseCase = "browse",
    ) -> JsonObject:
        limit = limit if limit is not None else self._settings.categories_limit
        raw = await self._client.get_categories(depth)
        catalog = _catalog_of(raw)
        projected = [
            shape.project_category(c, use_case, depth=depth, include_images=include_images)
            for c in catalog[:limit]
        ]
        truncated = len(catalog) > limit
        wider = limit * 2 or self._settings.categories_limit
        return {
            "type": raw.get("type") if isinstance(raw, dict) else None,
            "catalog": projected,
            "meta": {
                "total_categories": len(catalog),
                "returned": len(projected),
                "use_case": use_case,
                "truncated": truncated,
                "next_page_hint": f"Use limit={wider} to see more categories" if truncated else None,
            },
        }

    async def category_details(
        self,
        category_id: str,
        *,
        depth: int = 1,
        include_items: bool = True,
        items_limit: int = 20,
        include_images: bool = False,
    ) -> Result[JsonObject, NotFound]:
        """
        Locate one category anywhere in the category tree.

        Deep category fetches are not always accepted, so lower depths are
        tried down to 0; a failure at depth 0 propagates.
        """
        used_depth = depth
        raw: Json = None
        for d in range(depth, -1, -1):
            try:
                raw = await self._client.get_categories(d)
            except Exception as e:
                if d == 0:
                    raise
                log.info("Category fetch at depth %d failed (%s), retrying lower", d, e)
                continue
            used_depth = d
            break

        found = tree.find_first(_catalog_of(raw), tree.has_id(category_id))
        if found is None:
            return Error(NotFound("Category", category_id, CATEGORY_HINT))

        category = shape.pick(found, {"id": "id", "name": "name", "type": "type"})
        if found.get("level"):
            category["level"] = found["level"]
        if include_images and found.get("image_id"):
            category["image_id"] = found["image_id"]

        children = found.get("items")
        truncated = False
        if include_items and isinstance(children, list):
            items = [shape.category_item(i, include_images=include_images) for i in children[:items_limit]]
            category["items"] = items
            category["items_count"] = len(children)
            category["items_returned"] = len(items)
            truncated = len(children) > items_limit

        return Ok(
            {
                "category": category,
                "meta": {
                    "categoryId": category_id,
                    "includeItems": include_items,
                    "itemsLimit": items_limit,
                    "usedDepth": used_depth,
                    "requestedDepth": depth,
                    "truncated": truncated,
                },
            }
        )

    # ───────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────

    async def cart(self) -> JsonObject:
        return shape.flatten_cart(await self._client.get_shopping_cart())

    async def add_to_cart(self, product_id: str, count: int = 1) -> JsonObject:
        cart = await self._client.add_product_to_shopping_cart(product_id, count)
        return {"message": f"Added {count} item(s) to cart", "cart": shape.flatten_cart(cart)}

    async def remove_from_cart(self, product_id: str, count: int = 1) -> JsonObject:
        cart = await self._client.remove_product_from_shopping_cart(product_id, count)
        return {"message": f"Removed {count} item(s) from cart", "cart": shape.flatten_cart(cart)}

    async def clear_cart(self) -> JsonObject:
        cart = await self._client.clear_shopping_cart()
        return {"message": "Shopping cart cleared", "cart": shape.flatten_cart(cart)}

    # ───────────────────────────────────────────────────────────────────────
    # Delivery
    # ───────────────────────────────────────────────────────────────────────

    async def delivery_slots(self) -> JsonObject:
        raw = await self._client.get_delivery_slots()
        body = raw if isinstance(raw, dict) else {}
        slots_raw = body.get("delivery_slots")
        slots = shape.available_slots(slots_raw if isinstance(slots_raw, list) else [])
        selected = body.get("selected_slot")
        return {
            "slots": slots,
            "selected_slot_id": selected.get("slot_id") if isinstance(selected, dict) else None,
            "total_available": len(slots),
        }

    async def set_delivery_slot(self, slot_id: str) -> JsonObject:
        order = await self._client.set_delivery_slot(slot_id)
        return {"message": "Delivery slot selected", "slotId": slot_id, "order": order}

    async def deliveries(
        self,
        filter: Sequence[str] = (),
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> shape.Page[Json]:
        limit = limit if limit is not None else self._settings.deliveries_limit
        return shape.paginate(await self._client.get_deliveries(list(filter)), offset, limit)

    async def delivery(self, delivery_id: str) -> Json:
        return await self._client.get_delivery(delivery_id)

    # ───────────────────────────────────────────────────────────────────────
    # Account
    # ───────────────────────────────────────────────────────────────────────

    async def suggestions(self, query: str) -> JsonObject:
        return {"query": query, "suggestions": await self._client.get_suggestions(query)}

    async def user_details(self) -> Json:
        return await self._client.get_user_details()

    async def lists(self, depth: int = 0) -> Json:
        if not 0 <= depth <= MAX_LIST_DEPTH:
            raise ValueError(f"list depth must be between 0 and {MAX_LIST_DEPTH}, got {depth}")
        return await self._client.get_lists(depth)

    async def wallet_transactions(self, page_number: int = 1) -> JsonObject:
        """One page of wallet history; pages are numbered from 1."""
        if page_number < 1:
            raise ValueError(f"page_number must be at least 1, got {page_number}")
        return {
            "pageNumber": page_number,
            "transactions": await self._client.get_wallet_transactions(page_number),
        }


__all__ = ("Catalog", "SearchPage", "SearchQuery", "SearchBatch", "CATEGORY_HINT", "MAX_LIST_DEPTH")
