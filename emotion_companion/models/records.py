"""Persisted records handled by the storage backend."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from .emotion import EmotionVector, utcnow


def new_id() -> str:
    return str(uuid4())


@dataclass
class User:
    """A person (or guest) using the companion."""

    name: str
    email: str | None = None
    age: int | None = None
    gender: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "gender": self.gender,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Session:
    """A monitoring/chat session."""

    user_id: str | None = None
    id: str = field(default_factory=new_id)
    start_time: datetime = field(default_factory=utcnow)
    end_time: datetime | None = None
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "is_active": self.is_active,
        }


@dataclass
class StoredEmotionSample:
    """An emotion sample persisted for a session."""

    session_id: str
    vector: EmotionVector
    captured_at: datetime = field(default_factory=utcnow)
    age: float | None = None
    gender: str | None = None
    confidence: int | None = None  # percentage
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "emotions": self.vector.to_dict(),
            "captured_at": self.captured_at.isoformat(),
            "age": self.age,
            "gender": self.gender,
            "confidence": self.confidence,
        }


@dataclass
class ChatMessage:
    """A user or assistant chat message."""

    session_id: str
    is_user: bool
    content: str
    emotion_context: EmotionVector | None = None
    provider: str | None = None  # set on assistant replies
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "is_user": self.is_user,
            "content": self.content,
            "emotion_context": (
                self.emotion_context.to_dict() if self.emotion_context else None
            ),
            "provider": self.provider,
            "timestamp": self.timestamp.isoformat(),
        }
