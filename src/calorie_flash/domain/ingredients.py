"""Domain models for analyzed meal ingredients."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Ingredient:
    """One identified food item with current macros and per-gram reference rates.

    The absolute fields (``calories``, ``protein_g``, ``carbs_g``, ``fat_g``) follow
    ``weight_g``; the ``ref_*`` rates are fixed when the ingredient is ingested.
    """

    name: str
    weight_g: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    ref_calories: float
    ref_protein: float
    ref_carbs: float
    ref_fat: float


@dataclass(frozen=True)
class SessionTotals:
    """Summed macros and weight across the current ingredients."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    weight_g: float
