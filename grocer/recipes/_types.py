"""
Recipe types — parsed records and the views built from them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Any

from grocer._types import Json

# ═══════════════════════════════════════════════════════════════════════════════
# Ingredient Classification (open enumeration)
# ═══════════════════════════════════════════════════════════════════════════════

CORE = "CORE"
VARIATION = "VARIATION"
CUPBOARD = "CUPBOARD"  # assumed on hand (salt, oil), never bought automatically

AVAILABLE = "AVAILABLE"


def _text(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def _number(raw: dict[str, Any], key: str, default: float | None = None) -> Any:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Records
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Ingredient:
    selling_unit_id: str
    name: str
    ingredient_type: str
    display_quantity: float | None
    display_unit: str | None
    selling_unit_quantity: float
    availability_status: str

    @property
    def is_cupboard(self) -> bool:
        return self.ingredient_type == CUPBOARD

    @property
    def is_available(self) -> bool:
        return self.availability_status == AVAILABLE

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> Ingredient:
        return cls(
            selling_unit_id=_text(raw, "selling_unit_id"),
            name=_text(raw, "name"),
            ingredient_type=_text(raw, "ingredient_type"),
            display_quantity=_number(raw, "display_ingredient_quantity"),
            display_unit=raw.get("display_unit_of_measurement"),
            selling_unit_quantity=_number(raw, "selling_unit_quantity", 0),
            availability_status=_text(raw, "availability_status"),
        )


@dataclass(frozen=True, slots=True)
class InstructionStep:
    header: str
    body: str
    type: str

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> InstructionStep:
        return cls(header=_text(raw, "header"), body=_text(raw, "body"), type=_text(raw, "type"))


@dataclass(frozen=True, slots=True)
class Recipe:
    """
    A recipe as discovered in the meal-planner payload. Immutable once fetched.

    Invariant: minimum_servings <= default_servings <= maximum_servings and
    default_servings > 0 (it is the scaling denominator).
    """

    recipe_id: str
    name: str
    description: str
    course: str | None
    kitchen: str | None
    is_vega_vegan: Json
    recipe_type: str | None
    default_servings: int | float
    minimum_servings: int | float
    maximum_servings: int | float
    serving_step: int | None
    preparation_time_in_minutes: int | None
    quality_cue: str | None
    label: str | None
    ingredients: tuple[Ingredient, ...]
    preparation_instructions: tuple[InstructionStep, ...]
    image_ids: tuple[str, ...] | None

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> Recipe:
        """Parse a recipe-shaped node. Raises ValueError on broken invariants."""
        default = _number(raw, "default_servings")
        if default is None or default <= 0:
            raise ValueError(f"recipe {raw.get('recipe_id')!r} has no positive default_servings")
        minimum = _number(raw, "minimum_servings", default)
        maximum = _number(raw, "maximum_servings", default)
        if not minimum <= default <= maximum:
            raise ValueError(
                f"recipe {raw.get('recipe_id')!r} servings out of order: "
                f"{minimum} <= {default} <= {maximum}"
            )

        label = raw.get("display_label")
        images = raw.get("images")
        return cls(
            recipe_id=str(raw["recipe_id"]),
            name=_text(raw, "name"),
            description=_text(raw, "description"),
            course=raw.get("course"),
            kitchen=raw.get("kitchen"),
            is_vega_vegan=raw.get("is_vega_vegan"),
            recipe_type=raw.get("recipe_type"),
            default_servings=default,
            minimum_servings=minimum,
            maximum_servings=maximum,
            serving_step=_number(raw, "serving_step"),
            preparation_time_in_minutes=_number(raw, "active_preparation_time_in_minutes"),
            quality_cue=raw.get("quality_cue"),
            label=label.get("text") if isinstance(label, dict) else None,
            ingredients=tuple(
                Ingredient.from_payload(i) for i in raw["ingredients"] if isinstance(i, dict)
            ),
            preparation_instructions=tuple(
                InstructionStep.from_payload(s)
                for s in raw.get("preparation_instructions") or ()
                if isinstance(s, dict)
            ),
            image_ids=(
                tuple(str(img["image_id"]) for img in images if isinstance(img, dict) and img.get("image_id"))
                if isinstance(images, list)
                else None
            ),
        )


def scaled_quantity(
    selling_unit_quantity: float, servings: int | float, default_servings: int | float
) -> int:
    """
    Orderable units for the requested servings, always rounded up.

    Exact rational arithmetic: 3 units at 2 servings scaled to 4 is 6, not 7.
    """
    scale = Fraction(str(servings)) / Fraction(str(default_servings))
    return math.ceil(Fraction(str(selling_unit_quantity)) * scale)


# ═══════════════════════════════════════════════════════════════════════════════
# Views
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RecipeSummary:
    recipe_id: str
    name: str
    description: str
    preparation_time_in_minutes: int | None
    default_servings: int | float
    course: str | None
    kitchen: str | None
    is_vega_vegan: Json
    recipe_type: str | None
    quality_cue: str | None
    label: str | None
    ingredient_count: int

    @classmethod
    def of(cls, r: Recipe) -> RecipeSummary:
        return cls(
            recipe_id=r.recipe_id,
            name=r.name,
            description=r.description,
            preparation_time_in_minutes=r.preparation_time_in_minutes,
            default_servings=r.default_servings,
            course=r.course,
            kitchen=r.kitchen,
            is_vega_vegan=r.is_vega_vegan,
            recipe_type=r.recipe_type,
            quality_cue=r.quality_cue,
            label=r.label,
            ingredient_count=len(r.ingredients),
        )


@dataclass(frozen=True, slots=True)
class IngredientView:
    selling_unit_id: str
    name: str
    ingredient_type: str
    quantity: float | None
    unit: str | None
    selling_unit_quantity: float
    availability: str


@dataclass(frozen=True, slots=True)
class InstructionView:
    header: str
    body: str
    type: str


@dataclass(frozen=True, slots=True)
class RecipeDetail:
    recipe_id: str
    name: str
    description: str
    course: str | None
    kitchen: str | None
    is_vega_vegan: Json
    recipe_type: str | None
    default_servings: int | float
    minimum_servings: int | float
    maximum_servings: int | float
    serving_step: int | None
    preparation_time_in_minutes: int | None
    quality_cue: str | None
    label: str | None
    ingredients: tuple[IngredientView, ...]
    preparation_instructions: tuple[InstructionView, ...]
    images: tuple[str, ...] | None

    @classmethod
    def of(cls, r: Recipe) -> RecipeDetail:
        return cls(
            recipe_id=r.recipe_id,
            name=r.name,
            description=r.description,
            course=r.course,
            kitchen=r.kitchen,
            is_vega_vegan=r.is_vega_vegan,
            recipe_type=r.recipe_type,
            default_servings=r.default_servings,
            minimum_servings=r.minimum_servings,
            maximum_servings=r.maximum_servings,
            serving_step=r.serving_step,
            preparation_time_in_minutes=r.preparation_time_in_minutes,
            quality_cue=r.quality_cue,
            label=r.label,
            ingredients=tuple(
                IngredientView(
                    selling_unit_id=i.selling_unit_id,
                    name=i.name,
                    ingredient_type=i.ingredient_type,
                    quantity=i.display_quantity,
                    unit=i.display_unit,
                    selling_unit_quantity=i.selling_unit_quantity,
                    availability=i.availability_status,
                )
                for i in r.ingredients
            ),
            preparation_instructions=tuple(
                InstructionView(header=s.header, body=s.body, type=s.type)
                for s in r.preparation_instructions
            ),
            images=r.image_ids,
        )


@dataclass(frozen=True, slots=True)
class ScaledIngredient:
    selling_unit_id: str
    name: str
    ingredient_type: str
    quantity: int
    availability: str


@dataclass(frozen=True, slots=True)
class AddedItem:
    name: str
    quantity: int


@dataclass(frozen=True, slots=True)
class FailedItem:
    """An ingredient whose add-to-cart call raised. Distinct from unavailable."""

    name: str
    quantity: int
    error: str


@dataclass(frozen=True, slots=True)
class AddRecipeResult:
    recipe_name: str
    servings: int | float
    added: tuple[AddedItem, ...]
    skipped_cupboard: tuple[str, ...]
    unavailable: tuple[str, ...]
    failed: tuple[FailedItem, ...] = ()

    @property
    def partial(self) -> bool:
        """Some add calls failed while others may have succeeded."""
        return bool(self.failed)


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
)
