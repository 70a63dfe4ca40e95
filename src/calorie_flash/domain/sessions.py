"""Domain models for analysis sessions."""

from dataclasses import dataclass
from enum import Enum

from calorie_flash.domain.ingredients import Ingredient, SessionTotals


class SessionStatus(str, Enum):
    """Lifecycle state of an analysis session."""

    IDLE = "idle"
    CAPTURING = "capturing"
    ANALYZING = "analyzing"
    REVIEWING = "reviewing"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session at a point in time."""

    status: SessionStatus
    image_count: int
    notes: str
    ingredients: tuple[Ingredient, ...]
    totals: SessionTotals
    error: str | None
    explanation: str | None
