"""Meal analysis service using vision LLMs."""

import base64
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from calorie_flash.domain.analysis import AnalysisResult

_INGREDIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Ingredient name"},
        "weightValue": {
            "type": "number",
            "description": "Estimated weight of this ingredient in grams",
        },
        "calories": {"type": "number", "description": "Calories for this amount"},
        "protein": {"type": "number", "description": "Protein (g)"},
        "carbs": {"type": "number", "description": "Carbohydrates (g)"},
        "fat": {"type": "number", "description": "Fat (g)"},
    },
    "required": ["name", "weightValue", "calories", "protein", "carbs", "fat"],
    "additionalProperties": False,
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "totalCalories": {"type": "number", "description": "Total calories (kcal)"},
        "totalWeight": {
            "type": "string",
            "description": "Total weight, e.g. 450g",
        },
        "protein": {"type": "number", "description": "Total protein (g)"},
        "carbs": {"type": "number", "description": "Total carbohydrates (g)"},
        "fat": {"type": "number", "description": "Total fat (g)"},
        "ingredients": {"type": "array", "items": _INGREDIENT_SCHEMA},
        "explanation": {"type": "string", "description": "Short explanation"},
    },
    "required": [
        "totalCalories",
        "totalWeight",
        "protein",
        "carbs",
        "fat",
        "ingredients",
        "explanation",
    ],
    "additionalProperties": False,
}


class VisionClient(Protocol):
    """Interface for LLM meal analysis."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_urls: list[str],
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured analysis data."""


@dataclass
class VisionService:
    """Service that prepares analysis prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool
    language: str = "Bulgarian"

    async def analyze(self, images: Sequence[bytes], notes: str) -> AnalysisResult:
        """Estimate per-ingredient nutrition for the given meal photos."""
        data_urls = [_to_data_url(image) for image in images]
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_urls=data_urls,
            schema=ANALYSIS_SCHEMA,
            prompt=build_prompt(notes, self.language),
        )
        return AnalysisResult.model_validate(raw)


def build_prompt(notes: str, language: str) -> str:
    """Build the analysis instructions with the user's notes embedded."""
    return (
        "Analyze these photos of food with professional accuracy.\n"
        f'Notes from the user: "{notes}".\n\n'
        "Instructions:\n"
        f"1. Write all names and the explanation in {language}.\n"
        "2. Estimate the weight and macros for EACH ingredient separately.\n"
        "3. Be very precise about portions, judging by the plate and surroundings.\n"
        "4. Do not inflate calories if the meal looks light.\n"
        "5. If there is a dressing or sauce, list it as a separate ingredient."
    )


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
