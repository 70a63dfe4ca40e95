"""Models for meal analysis results returned by the inference service."""

from pydantic import BaseModel, ConfigDict, Field


class RawIngredient(BaseModel):
    """Ingredient as estimated by the inference service."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    weight_value: float | None = Field(default=None, alias="weightValue")
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


class AnalysisResult(BaseModel):
    """Structured nutrition estimate for a set of meal photos."""

    model_config = ConfigDict(populate_by_name=True)

    total_calories: float = Field(default=0.0, alias="totalCalories")
    total_weight: str = Field(default="", alias="totalWeight")
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    ingredients: list[RawIngredient] = Field(default_factory=list)
    explanation: str = ""
