"""
Pydantic schemas for the Emotion Companion API.

Emotion payloads are accepted as loose mappings: malformed vectors are
normalized to the neutral default by the core instead of being rejected.
"""
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class CreateUserRequest(BaseModel):
    """Request model for creating (or fetching) a user."""

    name: str = Field(..., min_length=1, max_length=128)
    email: str | None = None
    age: int | None = Field(None, ge=0, le=150)
    gender: str | None = None


class CreateSessionRequest(BaseModel):
    """Request model for starting a session."""

    user_id: str | None = None


class EmotionSampleRequest(BaseModel):
    """A sample to persist for a session."""

    session_id: str = Field(..., min_length=1)
    emotions: dict[str, Any] | None = Field(None, description="Seven-channel emotion vector")
    age: float | None = None
    gender: str | None = None
    confidence: int | None = Field(None, ge=0, le=100, description="Percentage")
    captured_at: datetime | None = None

    @field_validator("captured_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Timestamps without an offset are taken as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "session_id": "session-abc",
                    "emotions": {
                        "happy": 72.5,
                        "sad": 3.1,
                        "angry": 1.0,
                        "surprised": 8.4,
                        "fearful": 0.5,
                        "disgusted": 0.2,
                        "neutral": 14.3,
                    },
                    "age": 29,
                    "gender": "female",
                    "confidence": 85,
                }
            ]
        }
    }


class DetectionRequest(BaseModel):
    """A live detector reading pushed into the session buffer."""

    emotions: dict[str, Any] | None = None
    age: float | None = None
    gender: str | None = None


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    session_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=10000)
    emotion_context: dict[str, Any] | None = Field(
        None, description="Defaults to the session's live emotion state"
    )


class TestProviderRequest(BaseModel):
    """Request model for a manual provider check."""

    provider: str = Field("auto", description='Provider name, or "auto" for the chain')
    message: str = Field("Quick test", min_length=1)
    emotions: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = "healthy"
    service: str = "emotion-companion"
    version: str = "1.0.0"
    timestamp: str
    providers: list[dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    code: str
    details: dict[str, Any] | None = None
