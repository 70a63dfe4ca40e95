"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_flash.services.sessions import ANALYSIS_ERROR_MESSAGE

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    response_language: str = "Bulgarian"
    analysis_error_message: str = ANALYSIS_ERROR_MESSAGE
    dictation_enabled: bool = True
    transcription_model: str = "gpt-4o-mini-transcribe"
    dictation_language: str = "bg"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
