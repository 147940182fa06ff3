from __future__ import annotations

import asyncio
import copy
from collections.abc import Sequence
from typing import Any

import pytest

from grocer.config import Settings


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGroceryClient:
    """
    In-memory grocery API.

    Every call is recorded in `calls` as (method_name, args). Responses for
    send_request are keyed by (method, path); an Exception value is raised.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.page: Any = {}
        self.page_gate: asyncio.Event | None = None
        self.responses: dict[tuple[str, str], Any] = {}
        self.cart: Any = {}
        self.search_results: dict[str, list[Any]] = {}
        self.categories: dict[int, Any] = {}
        self.delivery_slots: Any = {}
        self.deliveries: list[Any] = []
        self.add_failures: dict[str, Exception] = {}
        self.failures: dict[str, Exception] = {}

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    @property
    def requests(self) -> list[tuple[Any, ...]]:
        return self.called("send_request")

    async def search(self, query: str) -> list[Any]:
        self._record("search", query)
        return copy.deepcopy(self.search_results.get(query, []))

    async def get_suggestions(self, query: str) -> Any:
        self._record("get_suggestions", query)
        return [{"suggestion": f"{query} 1l"}]

    async def get_categories(self, depth: int = 0) -> Any:
        self._record("get_categories", depth)
        value = self.categories.get(depth, {"type": "CATEGORIES", "catalog": []})
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)

    async def get_shopping_cart(self) -> Any:
        self._record("get_shopping_cart")
        return copy.deepcopy(self.cart)

    async def add_product_to_shopping_cart(self, product_id: str, count: int = 1) -> Any:
        self._record("add_product_to_shopping_cart", product_id, count)
        if product_id in self.add_failures:
            raise self.add_failures[product_id]
        return copy.deepcopy(self.cart)

    async def remove_product_from_shopping_cart(self, product_id: str, count: int = 1) -> Any:
        self._record("remove_product_from_shopping_cart", product_id, count)
        return copy.deepcopy(self.cart)

    async def clear_shopping_cart(self) -> Any:
        self._record("clear_shopping_cart")
        return {"items": []}

    async def get_delivery_slots(self) -> Any:
        self._record("get_delivery_slots")
        return copy.deepcopy(self.delivery_slots)

    async def set_delivery_slot(self, slot_id: str) -> Any:
        self._record("set_delivery_slot", slot_id)
        return {"selected_slot": {"slot_id": slot_id}}

    async def get_deliveries(self, filter: Sequence[str] = ()) -> list[Any]:
        self._record("get_deliveries", tuple(filter))
        return copy.deepcopy(self.deliveries)

    async def get_delivery(self, delivery_id: str) -> Any:
        self._record("get_delivery", delivery_id)
        return {"delivery_id": delivery_id, "status": "COMPLETED"}

    async def get_user_details(self) -> Any:
        self._record("get_user_details")
        return {"user_id": "u1", "firstname": "Ada"}

    async def get_lists(self, depth: int = 0) -> Any:
        self._record("get_lists", depth)
        return [{"id": "list-1", "depth": depth}]

    async def get_wallet_transactions(self, page_number: int = 1) -> Any:
        self._record("get_wallet_transactions", page_number)
        return [{"transaction_id": f"t{page_number}"}]

    async def send_request(
        self,
        method: str,
        path: str,
        data: Any = None,
        include_app_headers: bool = False,
    ) -> Any:
        self._record("send_request", method, path, data, include_app_headers)
        if method == "GET" and (method, path) not in self.responses:
            if self.page_gate is not None:
                await self.page_gate.wait()
            return copy.deepcopy(self.page)
        value = self.responses.get((method, path))
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)


def ingredient(
    unit_id: str,
    name: str,
    *,
    kind: str = "CORE",
    quantity: float = 1,
    availability: str = "AVAILABLE",
) -> dict[str, Any]:
    return {
        "selling_unit_id": unit_id,
        "name": name,
        "ingredient_type": kind,
        "display_ingredient_quantity": 100,
        "display_unit_of_measurement": "g",
        "selling_unit_quantity": quantity,
        "availability_status": availability,
    }


def recipe(recipe_id: str, name: str, ingredients: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    node: dict[str, Any] = {
        "recipe_id": recipe_id,
        "name": name,
        "description": f"{name} for two",
        "default_servings": 2,
        "minimum_servings": 1,
        "maximum_servings": 6,
        "active_preparation_time_in_minutes": 25,
        "ingredients": ingredients,
        "preparation_instructions": [{"header": "Step 1", "body": "Cook.", "type": "STEP"}],
        "images": [{"image_id": f"img-{recipe_id}"}],
    }
    node.update(extra)
    return node


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> FakeGroceryClient:
    return FakeGroceryClient()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def meal_page() -> dict[str, Any]:
    """Meal-planner page with two recipes buried at different depths."""
    pasta = recipe(
        "r1",
        "Pasta",
        [
            ingredient("s-pasta", "Pasta", quantity=3),
            ingredient("s-tomato", "Tomato", quantity=1.5),
            ingredient("s-salt", "Salt", kind="CUPBOARD", quantity=0),
            ingredient("s-basil", "Basil", kind="VARIATION", availability="OUT_OF_STOCK"),
        ],
        display_label={"text": "Quick"},
    )
    curry = recipe("r2", "Curry", [ingredient("s-rice", "Rice")])
    return {
        "id": "meals-planner-root",
        "body": {
            "children": [
                {"type": "BLOCK", "content": {"recipe": pasta}},
                {"type": "BLOCK", "children": [{"children": [curry]}]},
            ]
        },
    }


@pytest.fixture
def make_recipe():
    return recipe


@pytest.fixture
def make_ingredient():
    return ingredient
