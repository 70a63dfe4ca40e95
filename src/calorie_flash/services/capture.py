"""Camera capture capability used by analysis sessions."""

from typing import Protocol


class FrameSource(Protocol):
    """Interface for a camera that can be acquired, released and sampled."""

    def start(self) -> None:
        """Acquire the capture device."""

    def stop(self) -> None:
        """Release the capture device."""

    def capture_frame(self) -> bytes | None:
        """Return the current frame, or ``None`` if no frame is available."""
