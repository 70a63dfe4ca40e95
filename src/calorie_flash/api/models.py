"""Request and response models for the session API."""

from pydantic import BaseModel

from calorie_flash.domain.ingredients import Ingredient, SessionTotals
from calorie_flash.domain.sessions import SessionSnapshot
from calorie_flash.services.nutrition import round_half_up


class NotesUpdate(BaseModel):
    """Replacement text for the session notes."""

    notes: str


class WeightUpdate(BaseModel):
    """User-entered weight; non-numeric input is treated as zero."""

    weight: float | str | None = None


class IngredientView(BaseModel):
    name: str
    weight_g: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


class TotalsView(BaseModel):
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    weight_g: float


class SessionView(BaseModel):
    """Session state as shown to clients.

    ``display`` carries rounded totals for presentation; ``totals`` keeps full
    precision.
    """

    status: str
    image_count: int
    notes: str
    listening: bool
    ingredients: list[IngredientView]
    totals: TotalsView
    display: TotalsView
    error: str | None
    explanation: str | None


def session_view(snapshot: SessionSnapshot, *, listening: bool) -> SessionView:
    """Build the client view of a session snapshot."""
    return SessionView(
        status=snapshot.status.value,
        image_count=snapshot.image_count,
        notes=snapshot.notes,
        listening=listening,
        ingredients=[_ingredient_view(item) for item in snapshot.ingredients],
        totals=_totals_view(snapshot.totals),
        display=_display_totals(snapshot.totals),
        error=snapshot.error,
        explanation=snapshot.explanation,
    )


def _ingredient_view(item: Ingredient) -> IngredientView:
    return IngredientView(
        name=item.name,
        weight_g=item.weight_g,
        calories=item.calories,
        protein_g=item.protein_g,
        carbs_g=item.carbs_g,
        fat_g=item.fat_g,
    )


def _totals_view(totals: SessionTotals) -> TotalsView:
    return TotalsView(
        calories=totals.calories,
        protein_g=totals.protein_g,
        carbs_g=totals.carbs_g,
        fat_g=totals.fat_g,
        weight_g=totals.weight_g,
    )


def _display_totals(totals: SessionTotals) -> TotalsView:
    return TotalsView(
        calories=round_half_up(totals.calories),
        protein_g=round_half_up(totals.protein_g, 1),
        carbs_g=round_half_up(totals.carbs_g, 1),
        fat_g=round_half_up(totals.fat_g, 1),
        weight_g=round_half_up(totals.weight_g),
    )
