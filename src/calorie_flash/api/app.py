"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from calorie_flash.adapters.openai_transcription_backend import (
    OpenAITranscriptionBackend,
)
from calorie_flash.api.models import (
    NotesUpdate,
    SessionView,
    WeightUpdate,
    session_view,
)
from calorie_flash.app_logging import configure_logging
from calorie_flash.containers import AppContainer, build_container
from calorie_flash.services.sessions import InvalidTransitionError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies.

    Handlers are all coroutines so that session state is only touched from the
    event loop thread.
    """
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _view(state_container: AppContainer) -> SessionView:
        return session_view(
            state_container.session_controller.snapshot(),
            listening=state_container.dictation.listening,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def get_session(request: Request) -> SessionView:
        """Return the current session state."""
        return _view(request.app.state.container)

    @app.put("/camera/frame")
    async def push_frame(request: Request) -> dict[str, bool]:
        """Receive the latest live camera frame."""
        state_container: AppContainer = request.app.state.container
        frame = await request.body()
        return {"accepted": state_container.frame_buffer.push_frame(frame)}

    @app.post("/session/capture")
    async def capture(request: Request) -> SessionView:
        """Queue the current camera frame."""
        state_container: AppContainer = request.app.state.container
        _run(state_container.session_controller.capture)
        return _view(state_container)

    @app.delete("/session/images/{index}")
    async def discard_image(index: int, request: Request) -> SessionView:
        """Remove a queued image."""
        state_container: AppContainer = request.app.state.container
        _run(state_container.session_controller.discard_image, index)
        return _view(state_container)

    @app.put("/session/notes")
    async def update_notes(update: NotesUpdate, request: Request) -> SessionView:
        """Replace the session notes."""
        state_container: AppContainer = request.app.state.container
        state_container.session_controller.set_notes(update.notes)
        return _view(state_container)

    @app.post("/session/analyze")
    async def analyze(request: Request) -> SessionView:
        """Analyze the queued images and return the resulting session."""
        state_container: AppContainer = request.app.state.container
        await state_container.session_controller.analyze()
        return _view(state_container)

    @app.patch("/session/ingredients/{index}")
    async def edit_weight(
        index: int, update: WeightUpdate, request: Request
    ) -> SessionView:
        """Rescale an ingredient to a new weight."""
        state_container: AppContainer = request.app.state.container
        _run(state_container.session_controller.edit_weight, index, update.weight)
        return _view(state_container)

    @app.post("/session/reset")
    async def reset(request: Request) -> SessionView:
        """Start over with an empty session."""
        state_container: AppContainer = request.app.state.container
        state_container.session_controller.reset()
        return _view(state_container)

    @app.post("/dictation/toggle")
    async def toggle_dictation(request: Request) -> dict[str, bool]:
        """Start or stop listening for spoken notes."""
        state_container: AppContainer = request.app.state.container
        return {"listening": state_container.dictation.toggle()}

    @app.post("/dictation/audio")
    async def submit_audio(request: Request) -> SessionView:
        """Transcribe recorded audio into the session notes."""
        state_container: AppContainer = request.app.state.container
        backend = state_container.dictation_backend
        if not isinstance(backend, OpenAITranscriptionBackend):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Dictation is not available",
            )
        audio = await request.body()
        await backend.submit_audio(audio)
        logger.debug("Processed %d bytes of dictation audio", len(audio))
        return _view(state_container)

    return app


def _run(operation: Callable[..., object], *args: object) -> None:
    """Invoke a session operation, mapping contract errors to HTTP errors."""
    try:
        operation(*args)
    except InvalidTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except IndexError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc


def create_default_app() -> FastAPI:
    """Build the app from environment settings (``uvicorn --factory`` target)."""
    return create_app(build_container())
