"""
Recipes — discovery, caching and cart filling.

    from grocer import recipes as R

    store = R.RecipeStore(client)
    summaries = await store.list_recipes()
    result = await store.add_recipe_to_cart(recipe_id, servings=4)
"""

from __future__ import annotations

from grocer.recipes._types import (
    CORE,
    VARIATION,
    CUPBOARD,
    AVAILABLE,
    Ingredient,
    InstructionStep,
    Recipe,
    scaled_quantity,
    RecipeSummary,
    IngredientView,
    InstructionView,
    RecipeDetail,
    ScaledIngredient,
    AddedItem,
    FailedItem,
    AddRecipeResult,
)
from grocer.recipes._store import RecipeStore, LIST_HINT

__all__ = (
    "CORE",
    "VARIATION",
    "CUPBOARD",
    "AVAILABLE",
    "Ingredient",
    "InstructionStep",
    "Recipe",
    "scaled_quantity",
    "RecipeSummary",
    "IngredientView",
    "InstructionView",
    "RecipeDetail",
    "ScaledIngredient",
    "AddedItem",
    "FailedItem",
    "AddRecipeResult",
    "RecipeStore",
    "LIST_HINT",
)
