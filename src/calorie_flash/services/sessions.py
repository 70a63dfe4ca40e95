"""Session state machine for photo-based meal analysis."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from calorie_flash.domain.analysis import AnalysisResult
from calorie_flash.domain.ingredients import Ingredient, SessionTotals
from calorie_flash.domain.sessions import SessionSnapshot, SessionStatus
from calorie_flash.services.capture import FrameSource
from calorie_flash.services.nutrition import (
    aggregate,
    coerce_weight,
    derive_ingredients,
    set_weight,
)

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = "Възникна грешка при анализа. Моля, опитайте отново."


class InvalidTransitionError(RuntimeError):
    """Raised when an operation is not allowed in the current session state."""


class MealAnalyzer(Protocol):
    """Interface for the external nutrition inference service."""

    async def analyze(self, images: Sequence[bytes], notes: str) -> AnalysisResult:
        """Return a nutrition estimate for the given photos and notes."""


@dataclass
class SessionController:
    """State machine for a single capture-analyze-review cycle.

    Every mutation runs on one control thread; ``analyze`` is the only call that
    suspends. Each reset bumps a generation counter so that a response from an
    analysis started before the reset is dropped instead of repopulating the
    cleared session.
    """

    analyzer: MealAnalyzer
    frame_source: FrameSource
    error_message: str = ANALYSIS_ERROR_MESSAGE
    _status: SessionStatus = field(default=SessionStatus.IDLE, init=False)
    _images: list[bytes] = field(default_factory=list, init=False)
    _notes: str = field(default="", init=False)
    _ingredients: list[Ingredient] = field(default_factory=list, init=False)
    _totals: SessionTotals = field(init=False)
    _result: AnalysisResult | None = field(default=None, init=False)
    _error: str | None = field(default=None, init=False)
    _generation: int = field(default=0, init=False)
    _camera_active: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self._refresh_totals()
        self._acquire_camera()

    @property
    def status(self) -> SessionStatus:
        """Current state; an idle session with queued images is capturing."""
        if self._status is SessionStatus.IDLE and self._images:
            return SessionStatus.CAPTURING
        return self._status

    @property
    def notes(self) -> str:
        return self._notes

    @property
    def ingredients(self) -> tuple[Ingredient, ...]:
        return tuple(self._ingredients)

    @property
    def totals(self) -> SessionTotals:
        return self._totals

    def capture(self) -> bool:
        """Queue the current camera frame; return ``False`` if none was available."""
        self._require_idle("capture")
        frame = self.frame_source.capture_frame()
        if not frame:
            return False
        self._images.append(frame)
        return True

    def discard_image(self, index: int) -> None:
        """Remove a queued image by position."""
        self._require_idle("discard an image")
        if not 0 <= index < len(self._images):
            raise IndexError(f"image index {index} out of range")
        del self._images[index]

    def set_notes(self, text: str) -> None:
        """Replace the free-text notes."""
        self._notes = text

    def append_notes(self, text: str) -> None:
        """Append dictated text to the notes, space separated."""
        self._notes = f"{self._notes} {text}" if self._notes else text

    async def analyze(self) -> SessionStatus:
        """Send queued images (or a fresh frame) for analysis.

        Calls made while an analysis is in flight, or after a result or error is
        shown, have no effect.
        """
        if self._status is not SessionStatus.IDLE:
            logger.info("Ignoring analyze request in state %s", self._status.value)
            return self.status
        images = list(self._images)
        if not images:
            frame = self.frame_source.capture_frame()
            if frame:
                images.append(frame)
        if not images:
            logger.info("No frame available; analysis not started")
            return self.status

        generation = self._generation
        self._status = SessionStatus.ANALYZING
        self._error = None
        self._release_camera()
        try:
            result = await self.analyzer.analyze(images, self._notes)
            ingredients = derive_ingredients(result.ingredients)
        except Exception:
            if generation != self._generation:
                logger.info("Dropping failed analysis from a reset session")
                return self.status
            logger.exception("Meal analysis failed")
            self._status = SessionStatus.FAILED
            self._error = self.error_message
            return self.status

        if generation != self._generation:
            logger.info("Dropping analysis result from a reset session")
            return self.status
        self._result = result
        self._ingredients = ingredients
        self._refresh_totals()
        self._status = SessionStatus.REVIEWING
        logger.info("Analysis completed with %d ingredients", len(ingredients))
        return self.status

    def edit_weight(self, index: int, value: object) -> Ingredient:
        """Rescale one ingredient to a user-entered weight and refresh totals."""
        if self._status is not SessionStatus.REVIEWING:
            raise InvalidTransitionError(
                f"cannot edit weights in state {self._status.value}"
            )
        self._ingredients = set_weight(self._ingredients, index, coerce_weight(value))
        self._refresh_totals()
        return self._ingredients[index]

    def reset(self) -> None:
        """Clear images, notes, results and errors and return to idle."""
        self._generation += 1
        self._status = SessionStatus.IDLE
        self._images = []
        self._notes = ""
        self._ingredients = []
        self._refresh_totals()
        self._result = None
        self._error = None
        self._acquire_camera()

    def close(self) -> None:
        """Release the camera when the session is torn down."""
        self._release_camera()

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable view of the session."""
        return SessionSnapshot(
            status=self.status,
            image_count=len(self._images),
            notes=self._notes,
            ingredients=tuple(self._ingredients),
            totals=self._totals,
            error=self._error,
            explanation=self._result.explanation if self._result else None,
        )

    def _refresh_totals(self) -> None:
        self._totals = aggregate(self._ingredients)

    def _require_idle(self, action: str) -> None:
        if self._status is not SessionStatus.IDLE:
            raise InvalidTransitionError(
                f"cannot {action} in state {self._status.value}"
            )

    def _acquire_camera(self) -> None:
        if not self._camera_active:
            self.frame_source.start()
            self._camera_active = True

    def _release_camera(self) -> None:
        if self._camera_active:
            self.frame_source.stop()
            self._camera_active = False
