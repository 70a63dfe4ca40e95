"""In-process camera that holds the latest frame pushed by a client."""

from dataclasses import dataclass, field

from calorie_flash.services.capture import FrameSource


@dataclass
class FrameBuffer(FrameSource):
    """Frame source fed by an external camera stream.

    Frames are only accepted while the buffer is started; stopping it releases
    the device and forgets the last frame.
    """

    active: bool = field(default=False, init=False)
    _latest: bytes | None = field(default=None, init=False)

    def start(self) -> None:
        self.active = True

    def stop(self) -> None:
        self.active = False
        self._latest = None

    def push_frame(self, frame: bytes) -> bool:
        """Store a frame; return ``False`` if the camera is released."""
        if not self.active or not frame:
            return False
        self._latest = frame
        return True

    def capture_frame(self) -> bytes | None:
        if not self.active:
            return None
        return self._latest
