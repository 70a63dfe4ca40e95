"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_flash.adapters.frame_buffer import FrameBuffer
from calorie_flash.adapters.openai_transcription_backend import (
    OpenAITranscriptionBackend,
)
from calorie_flash.adapters.openai_vision_client import OpenAIVisionClient
from calorie_flash.config import Settings
from calorie_flash.services.dictation import (
    Dictation,
    DictationBackend,
    UnavailableDictationBackend,
)
from calorie_flash.services.sessions import SessionController
from calorie_flash.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    frame_buffer: FrameBuffer
    vision_service: VisionService
    session_controller: SessionController
    dictation_backend: DictationBackend
    dictation: Dictation
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    frame_buffer = FrameBuffer()
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        language=resolved_settings.response_language,
    )
    session_controller = SessionController(
        analyzer=vision_service,
        frame_source=frame_buffer,
        error_message=resolved_settings.analysis_error_message,
    )
    dictation_backend = select_dictation_backend(resolved_settings)
    dictation = Dictation(
        backend=dictation_backend,
        append_text=session_controller.append_notes,
    )

    async def close_resources() -> None:
        session_controller.close()
        await openai_client.close()
        if isinstance(dictation_backend, OpenAITranscriptionBackend):
            await dictation_backend.close()

    return AppContainer(
        settings=resolved_settings,
        frame_buffer=frame_buffer,
        vision_service=vision_service,
        session_controller=session_controller,
        dictation_backend=dictation_backend,
        dictation=dictation,
        close_resources=close_resources,
    )


def select_dictation_backend(settings: Settings) -> DictationBackend:
    """Pick the speech backend available for this deployment."""
    if not settings.dictation_enabled:
        return UnavailableDictationBackend()
    return OpenAITranscriptionBackend.create(
        api_key=settings.openai_api_key,
        model=settings.transcription_model,
        language=settings.dictation_language,
    )
