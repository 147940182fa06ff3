"""
Recipe store — cached recipe discovery and the operations built on it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from datetime import timedelta
from typing import Never, assert_never

from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from grocer import cache as C
from grocer import tree
from grocer.client import GroceryClient
from grocer.config import Settings, get_settings
from grocer.errors import NotFound, InvalidServings
from grocer.recipes._types import (
    Recipe,
    Ingredient,
    RecipeSummary,
    RecipeDetail,
    ScaledIngredient,
    AddedItem,
    FailedItem,
    AddRecipeResult,
    scaled_quantity,
)

log = logging.getLogger("grocer.recipes")

LIST_HINT = "Use list_recipes to find valid recipe IDs."

type Recipes = tuple[Recipe, ...]


class RecipeStore:
    """
    Owns the recipe cache; nothing else reads or writes it.

    The meal-planner page is fetched at most once per freshness window
    (concurrent misses share one fetch), searched for recipe-shaped nodes,
    and the parsed recipes replace the cache entry wholesale.

    Example:
        store = RecipeStore(client)
        summaries = await store.list_recipes()
        match await store.add_recipe_to_cart("r-42", servings=4):
            case Ok(res):
                ...
            case Error(NotFound() as nf):
                ...
    """

    def __init__(
        self,
        client: GroceryClient,
        *,
        policy: C.Policy | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = get_settings() if settings is None else settings
        self._client = client
        self._path = settings.meal_planner_path
        self._max_depth = settings.tree_max_depth
        self._concurrency = max(1, settings.ingredient_concurrency)
        policy = policy or C.Policy(ttl=timedelta(seconds=settings.recipe_ttl_seconds))
        self._cache: C.CacheExecutor[str, Recipes, Never] = (
            C.cache(lambda path: f"recipes:{path}", self._fetch)
            .tier(C.LocalTier[Recipes](max_size=1))
            .policy(policy)
            .build()
        )

    # ───────────────────────────────────────────────────────────────────────
    # Cache
    # ───────────────────────────────────────────────────────────────────────

    def _fetch(self, path: str) -> LazyCoroResult[Recipes, Never]:
        async def impl() -> Result[Recipes, Never]:
            payload = await self._client.send_request("GET", path, None, include_app_headers=True)
            nodes = tree.find_all(payload, tree.is_recipe_shaped, max_depth=self._max_depth)
            recipes: list[Recipe] = []
            for node in nodes:
                try:
                    recipes.append(Recipe.from_payload(node))
                except ValueError as e:
                    log.warning("Skipping malformed recipe record: %s", e)
            log.info("Fetched %d recipes from %s", len(recipes), path)
            return Ok(tuple(recipes))

        return LazyCoroResult(impl)

    async def recipes(self) -> Recipes:
        """Current recipes, refetched when the cache is stale or absent."""
        result = await self._cache.get(self._path)
        match result:
            case Ok(cached):
                return cached.value
            case Error(never):
                assert_never(never)

    async def refresh(self) -> Recipes:
        await self._cache.invalidate(self._path)
        return await self.recipes()

    async def _find(self, recipe_id: str) -> Result[Recipe, NotFound]:
        for recipe in await self.recipes():
            if recipe.recipe_id == recipe_id:
                return Ok(recipe)
        return Error(NotFound("Recipe", recipe_id, LIST_HINT))

    # ───────────────────────────────────────────────────────────────────────
    # Views
    # ───────────────────────────────────────────────────────────────────────

    async def list_recipes(self) -> list[RecipeSummary]:
        """One summary per cached recipe, in discovery order (no sort implied)."""
        return [RecipeSummary.of(r) for r in await self.recipes()]

    async def get_recipe_details(self, recipe_id: str) -> Result[RecipeDetail, NotFound]:
        match await self._find(recipe_id):
            case Ok(recipe):
                return Ok(RecipeDetail.of(recipe))
            case Error(e):
                return Error(e)

    async def scaled_ingredients(
        self,
        recipe_id: str,
        servings: int | float | None = None,
        *,
        ingredient_types: Collection[str] | None = None,
    ) -> Result[list[ScaledIngredient], NotFound | InvalidServings]:
        """Ingredient list scaled to servings, optionally limited to some types."""
        match await self._find(recipe_id):
            case Error(e):
                return Error(e)
            case Ok(recipe):
                pass

        match _resolve_servings(recipe, servings):
            case Error(e):
                return Error(e)
            case Ok(count):
                pass

        return Ok(
            [
                ScaledIngredient(
                    selling_unit_id=i.selling_unit_id,
                    name=i.name,
                    ingredient_type=i.ingredient_type,
                    quantity=scaled_quantity(i.selling_unit_quantity, count, recipe.default_servings),
                    availability=i.availability_status,
                )
                for i in recipe.ingredients
                if ingredient_types is None or i.ingredient_type in ingredient_types
            ]
        )

    # ───────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────

    async def add_recipe_to_cart(
        self,
        recipe_id: str,
        servings: int | float | None = None,
    ) -> Result[AddRecipeResult, NotFound | InvalidServings]:
        """
        Put every orderable ingredient of a recipe into the cart.

        CUPBOARD ingredients are skipped, then unavailable ones; the rest are
        added with ceil(selling_unit_quantity * servings / default_servings).
        A failing add call is recorded under `failed` and the loop goes on.
        """
        match await self._find(recipe_id):
            case Error(e):
                return Error(e)
            case Ok(recipe):
                pass

        match _resolve_servings(recipe, servings):
            case Error(e):
                return Error(e)
            case Ok(count):
                pass

        skipped_cupboard: list[str] = []
        unavailable: list[str] = []
        to_add: list[tuple[Ingredient, int]] = []

        for ingredient in recipe.ingredients:
            if ingredient.is_cupboard:
                skipped_cupboard.append(ingredient.name)
            elif not ingredient.is_available:
                unavailable.append(ingredient.name)
            else:
                quantity = scaled_quantity(
                    ingredient.selling_unit_quantity, count, recipe.default_servings
                )
                to_add.append((ingredient, quantity))

        outcomes = await self._add_all(to_add)

        added: list[AddedItem] = []
        failed: list[FailedItem] = []
        for (ingredient, quantity), outcome in zip(to_add, outcomes):
            match outcome:
                case Ok(_):
                    added.append(AddedItem(name=ingredient.name, quantity=quantity))
                case Error(message):
                    log.warning(
                        "Adding %s x%d (%s) failed: %s",
                        ingredient.name,
                        quantity,
                        ingredient.selling_unit_id,
                        message,
                    )
                    failed.append(FailedItem(name=ingredient.name, quantity=quantity, error=message))

        return Ok(
            AddRecipeResult(
                recipe_name=recipe.name,
                servings=count,
                added=tuple(added),
                skipped_cupboard=tuple(skipped_cupboard),
                unavailable=tuple(unavailable),
                failed=tuple(failed),
            )
        )

    def _add_one(self, ingredient: Ingredient, quantity: int) -> LazyCoroResult[object, str]:
        return L.catching_async(
            lambda: self._client.add_product_to_shopping_cart(ingredient.selling_unit_id, quantity),
            on_error=str,
        )

    async def _add_all(self, items: list[tuple[Ingredient, int]]) -> list[Result[object, str]]:
        """Outcomes in the order of items."""
        if self._concurrency == 1:
            return [await self._add_one(i, q) for i, q in items]

        gate = asyncio.Semaphore(self._concurrency)

        async def bounded(ingredient: Ingredient, quantity: int) -> Result[object, str]:
            async with gate:
                return await self._add_one(ingredient, quantity)

        return list(await asyncio.gather(*(bounded(i, q) for i, q in items)))


def _resolve_servings(
    recipe: Recipe, servings: int | float | None
) -> Result[int | float, InvalidServings]:
    if servings is None:
        return Ok(recipe.default_servings)
    if servings < 1:
        return Error(InvalidServings(recipe.recipe_id, servings))
    return Ok(servings)


__all__ = ("RecipeStore", "LIST_HINT")
