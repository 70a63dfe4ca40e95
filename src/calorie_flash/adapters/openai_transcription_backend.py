"""Dictation backend that transcribes recorded audio with OpenAI."""

import logging
from dataclasses import dataclass, field

from openai import AsyncOpenAI

from calorie_flash.services.dictation import DictationBackend, DictationListener

logger = logging.getLogger(__name__)


@dataclass
class OpenAITranscriptionBackend(DictationBackend):
    """Speech recognition via the OpenAI audio transcription endpoint.

    An activation starts with ``start`` and is completed by ``submit_audio``,
    which emits at most one result and ends the activation. Each start or stop
    bumps an activation counter; a transcription that returns after its
    activation was stopped is dropped.
    """

    client: AsyncOpenAI
    model: str
    language: str
    available: bool = True
    active: bool = field(default=False, init=False)
    _listener: DictationListener | None = field(default=None, init=False)
    _activation: int = field(default=0, init=False)
    _submitted: bool = field(default=False, init=False)

    @classmethod
    def create(
        cls, api_key: str, model: str, language: str
    ) -> "OpenAITranscriptionBackend":
        """Create a transcription backend with its own OpenAI client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model, language=language)

    def bind(self, listener: DictationListener) -> None:
        self._listener = listener

    def start(self) -> None:
        if self.active:
            raise RuntimeError("Dictation already started")
        self.active = True
        self._activation += 1
        self._submitted = False

    def stop(self) -> None:
        if not self.active:
            return
        self.active = False
        self._activation += 1
        if self._listener:
            self._listener.on_end()

    async def submit_audio(self, audio: bytes, filename: str = "notes.webm") -> None:
        """Transcribe audio recorded during the current activation."""
        if not self.active or self._submitted:
            return
        self._submitted = True
        activation = self._activation
        try:
            transcription = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
                language=self.language,
            )
        except Exception:
            if activation != self._activation:
                logger.info("Dropping failed transcription of a stopped activation")
                return
            logger.exception("Transcription failed")
            self._finish(None)
            return
        if activation != self._activation:
            logger.info("Dropping transcription from a stopped activation")
            return
        self._finish(transcription.text)

    def _finish(self, text: str | None) -> None:
        self.active = False
        listener = self._listener
        if listener is None:
            return
        if text:
            listener.on_result(text)
        elif text is None:
            listener.on_error()
        listener.on_end()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
