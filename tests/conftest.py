"""Shared test fixtures."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from calorie_flash.adapters.frame_buffer import FrameBuffer
from calorie_flash.config import Settings
from calorie_flash.containers import AppContainer
from calorie_flash.domain.analysis import AnalysisResult
from calorie_flash.services.dictation import Dictation, DictationListener
from calorie_flash.services.sessions import SessionController
from calorie_flash.services.vision import VisionClient, VisionService

JPEG_FRAME = b"\xff\xd8\xff\xe0" + b"frame"

RICE_PAYLOAD: dict[str, object] = {
    "totalCalories": 195,
    "totalWeight": "150г",
    "protein": 4,
    "carbs": 42,
    "fat": 0.5,
    "ingredients": [
        {
            "name": "Ориз",
            "weightValue": 150,
            "calories": 195,
            "protein": 4,
            "carbs": 42,
            "fat": 0.5,
        }
    ],
    "explanation": "Порция варен бял ориз.",
}


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(default_factory=lambda: dict(RICE_PAYLOAD))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append({"image_data_urls": image_data_urls, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class BlockingAnalyzer:
    """Analyzer that waits until released, for in-flight scenarios."""

    payload: dict[str, object] = field(default_factory=lambda: dict(RICE_PAYLOAD))
    error: Exception | None = None
    calls: int = 0
    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def analyze(self, images: Sequence[bytes], notes: str) -> AnalysisResult:
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return AnalysisResult.model_validate(self.payload)


@dataclass
class RecordingFrameSource:
    """Frame source that records device acquire/release calls."""

    frame: bytes | None = JPEG_FRAME
    events: list[str] = field(default_factory=list)

    def start(self) -> None:
        self.events.append("start")

    def stop(self) -> None:
        self.events.append("stop")

    def capture_frame(self) -> bytes | None:
        return self.frame


@dataclass
class FakeDictationBackend:
    """Dictation backend driven directly by tests."""

    available: bool = True
    fail_on_start: bool = False
    started: int = 0
    listener: DictationListener | None = None

    def bind(self, listener: DictationListener) -> None:
        self.listener = listener

    def start(self) -> None:
        if self.fail_on_start:
            raise RuntimeError("microphone busy")
        self.started += 1

    def stop(self) -> None:
        if self.listener:
            self.listener.on_end()

    def emit(self, text: str) -> None:
        assert self.listener is not None
        self.listener.on_result(text)
        self.listener.on_end()


def build_vision_service(client: VisionClient) -> VisionService:
    return VisionService(
        client=client,
        model="gpt-5.2",
        reasoning_effort=None,
        store=False,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def frame_buffer() -> FrameBuffer:
    return FrameBuffer()


@pytest.fixture
def dictation_backend() -> FakeDictationBackend:
    return FakeDictationBackend()


@pytest.fixture
def container(
    settings: Settings,
    vision_client: FakeVisionClient,
    frame_buffer: FrameBuffer,
    dictation_backend: FakeDictationBackend,
) -> AppContainer:
    vision_service = build_vision_service(vision_client)
    session_controller = SessionController(
        analyzer=vision_service,
        frame_source=frame_buffer,
        error_message=settings.analysis_error_message,
    )
    dictation = Dictation(
        backend=dictation_backend,
        append_text=session_controller.append_notes,
    )

    async def close_resources() -> None:
        session_controller.close()

    return AppContainer(
        settings=settings,
        frame_buffer=frame_buffer,
        vision_service=vision_service,
        session_controller=session_controller,
        dictation_backend=dictation_backend,
        dictation=dictation,
        close_resources=close_resources,
    )
