"""Reference-rate derivation, weight editing and totals for analyzed meals."""

import math
import numbers
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from calorie_flash.domain.analysis import RawIngredient
from calorie_flash.domain.ingredients import Ingredient, SessionTotals

MIN_REFERENCE_WEIGHT_G = 1.0


def derive_ingredients(raw_items: Sequence[RawIngredient]) -> list[Ingredient]:
    """Attach per-gram reference rates to raw ingredient estimates.

    Missing numbers count as zero. The weight used as divisor is floored at one
    gram and becomes the ingredient's weight; absolute macros are copied as-is.
    """
    ingredients: list[Ingredient] = []
    for item in raw_items:
        weight = max(item.weight_value or 0.0, MIN_REFERENCE_WEIGHT_G)
        calories = item.calories or 0.0
        protein = item.protein or 0.0
        carbs = item.carbs or 0.0
        fat = item.fat or 0.0
        ingredients.append(
            Ingredient(
                name=item.name or "",
                weight_g=weight,
                calories=calories,
                protein_g=protein,
                carbs_g=carbs,
                fat_g=fat,
                ref_calories=calories / weight,
                ref_protein=protein / weight,
                ref_carbs=carbs / weight,
                ref_fat=fat / weight,
            )
        )
    return ingredients


def set_weight(
    ingredients: Sequence[Ingredient], index: int, new_weight: float
) -> list[Ingredient]:
    """Return a copy of ``ingredients`` with one item rescaled to ``new_weight``."""
    if not 0 <= index < len(ingredients):
        raise IndexError(f"ingredient index {index} out of range")
    updated = list(ingredients)
    updated[index] = _rescale(ingredients[index], max(new_weight, 0.0))
    return updated


def coerce_weight(value: object) -> float:
    """Turn user input into a non-negative weight; non-numbers and overflow are 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, numbers.Real | Decimal):
        return 0.0
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(number, 0.0)


def aggregate(ingredients: Sequence[Ingredient]) -> SessionTotals:
    """Sum macros and weight across all ingredients."""
    calories = 0.0
    protein = 0.0
    carbs = 0.0
    fat = 0.0
    weight = 0.0
    for item in ingredients:
        calories += item.calories
        protein += item.protein_g
        carbs += item.carbs_g
        fat += item.fat_g
        weight += item.weight_g
    return SessionTotals(
        calories=calories,
        protein_g=protein,
        carbs_g=carbs,
        fat_g=fat,
        weight_g=weight,
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from negative infinity, unlike ``round``'s banker's rule."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _rescale(item: Ingredient, weight: float) -> Ingredient:
    return replace(
        item,
        weight_g=weight,
        calories=round_half_up(weight * item.ref_calories),
        protein_g=round_half_up(weight * item.ref_protein, 1),
        carbs_g=round_half_up(weight * item.ref_carbs, 1),
        fat_g=round_half_up(weight * item.ref_fat, 1),
    )
