"""Voice dictation for meal notes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class DictationListener(Protocol):
    """Receives events from a dictation backend."""

    def on_result(self, text: str) -> None:
        """Handle a recognized phrase."""

    def on_error(self) -> None:
        """Handle a recognition failure."""

    def on_end(self) -> None:
        """Handle the end of an activation."""


class DictationBackend(Protocol):
    """Speech recognition capability with start/stop controls."""

    available: bool

    def bind(self, listener: DictationListener) -> None:
        """Register the listener that receives recognition events."""

    def start(self) -> None:
        """Begin one activation; emits at most one result."""

    def stop(self) -> None:
        """End the current activation."""


@dataclass
class UnavailableDictationBackend(DictationBackend):
    """No-op backend for platforms without speech recognition."""

    available: bool = False

    def bind(self, listener: DictationListener) -> None:
        return None

    def start(self) -> None:
        return None

    def stop(self) -> None:
        return None


@dataclass
class Dictation(DictationListener):
    """Listening on/off state that appends recognized text to the notes."""

    backend: DictationBackend
    append_text: Callable[[str], None]
    listening: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.backend.bind(self)

    def toggle(self) -> bool:
        """Start or stop listening and return the new listening state."""
        if not self.backend.available:
            return False
        try:
            if self.listening:
                self.backend.stop()
            else:
                self.backend.start()
                self.listening = True
        except Exception:
            logger.exception("Speech recognition error")
            self.listening = False
        return self.listening

    def on_result(self, text: str) -> None:
        transcript = text.strip()
        if transcript:
            self.append_text(transcript)
        self.listening = False

    def on_error(self) -> None:
        self.listening = False

    def on_end(self) -> None:
        self.listening = False
