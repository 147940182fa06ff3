"""
Grocery API client protocol.

The package never talks HTTP itself. Anything with these async methods
(an SDK wrapper, a test fake) can be passed to the components.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from grocer._types import Json


class GroceryClient(Protocol):
    """
    External grocery API collaborator.

    All methods return loosely-typed JSON; callers assume nothing beyond
    "object with named optional fields".

    send_request():
        Generic authenticated request. include_app_headers adds the
        app/page headers some page endpoints (the meal planner) require.
    """

    async def search(self, query: str) -> list[Json]: ...

    async def get_suggestions(self, query: str) -> Json: ...

    async def get_categories(self, depth: int = 0) -> Json: ...

    async def get_shopping_cart(self) -> Json: ...

    async def add_product_to_shopping_cart(
        self, product_id: str, count: int = 1
    ) -> Json: ...

    async def remove_product_from_shopping_cart(
        self, product_id: str, count: int = 1
    ) -> Json: ...

    async def clear_shopping_cart(self) -> Json: ...

    async def get_delivery_slots(self) -> Json: ...

    async def set_delivery_slot(self, slot_id: str) -> Json: ...

    async def get_deliveries(self, filter: Sequence[str] = ()) -> list[Json]: ...

    async def get_delivery(self, delivery_id: str) -> Json: ...

    async def get_user_details(self) -> Json: ...

    async def get_lists(self, depth: int = 0) -> Json: ...

    async def get_wallet_transactions(self, page_number: int = 1) -> Json: ...

    async def send_request(
        self,
        method: str,
        path: str,
        data: Json = None,
        include_app_headers: bool = False,
    ) -> Json: ...


__all__ = ("GroceryClient",)
