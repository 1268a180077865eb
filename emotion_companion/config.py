"""
Configuration module for the Emotion Companion service.

All secrets are read from environment variables (or a local .env file).
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ProviderCredentials:
    """Snapshot of provider credentials handed to each descriptor."""

    gemini_api_key: str = ""
    openai_api_key: str = ""
    huggingface_api_key: str = ""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    service_name: str = "emotion-companion"
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "info"
    cors_origins: str = "*"

    # Live emotion buffer
    buffer_capacity: int = Field(default=10, ge=1, description="Samples kept in memory")
    window_ms: int = Field(default=30000, ge=0, description="Trailing window for averages")

    # Detection loop
    sample_interval_seconds: float = Field(default=0.5, gt=0)
    persist_interval_seconds: float = Field(default=5.0, gt=0)
    default_confidence: int = Field(default=85, ge=0, le=100)

    # Provider chain, highest priority first. "local" is always appended.
    provider_order: list[str] = Field(
        default_factory=lambda: ["gemini", "openai", "huggingface", "local"]
    )
    # No bound unless configured
    provider_timeout_seconds: float | None = Field(default=None, gt=0)

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_max_tokens: int = 200
    openai_temperature: float = 0.7

    # Hugging Face inference API
    huggingface_api_key: str = ""
    huggingface_url: str = (
        "https://api-inference.huggingface.co/models/microsoft/DialoGPT-medium"
    )
    huggingface_max_length: int = 150
    huggingface_temperature: float = 0.7

    def credentials(self) -> ProviderCredentials:
        """Credential snapshot for provider descriptors."""
        return ProviderCredentials(
            gemini_api_key=self.gemini_api_key,
            openai_api_key=self.openai_api_key,
            huggingface_api_key=self.huggingface_api_key,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
