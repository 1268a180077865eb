"""
Storage - persistence contract and in-memory implementation.

The core only relies on the abstract read/write contract; a database-backed
implementation can replace InMemoryStorage without touching the services.
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any

import structlog

from ..models.emotion import EmotionSample, EmotionVector
from ..models.records import ChatMessage, Session, StoredEmotionSample, User

logger = structlog.get_logger()


class StorageBackend(ABC):
    """Abstract persistence interface."""

    # Users

    @abstractmethod
    async def create_user(
        self,
        name: str,
        email: str | None = None,
        age: int | None = None,
        gender: str | None = None,
    ) -> User:
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    async def get_user_by_name(self, name: str) -> User | None:
        pass

    # Sessions

    @abstractmethod
    async def create_session(self, user_id: str | None = None) -> Session:
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Session | None:
        pass

    @abstractmethod
    async def update_session(self, session_id: str, **updates: Any) -> Session | None:
        pass

    @abstractmethod
    async def get_active_session_for_user(self, user_id: str) -> Session | None:
        pass

    # Emotion samples

    @abstractmethod
    async def create_emotion_sample(
        self,
        session_id: str,
        sample: EmotionSample,
        confidence: int | None = None,
    ) -> StoredEmotionSample:
        pass

    @abstractmethod
    async def list_emotion_samples(self, session_id: str) -> list[StoredEmotionSample]:
        """Samples for a session in insertion order."""

    # Messages

    @abstractmethod
    async def create_message(
        self,
        session_id: str,
        is_user: bool,
        content: str,
        emotion_context: EmotionVector | None = None,
        provider: str | None = None,
    ) -> ChatMessage:
        pass

    @abstractmethod
    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        """Messages for a session ordered by timestamp."""


class InMemoryStorage(StorageBackend):
    """Dict-backed storage for development and tests."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._sessions: dict[str, Session] = {}
        self._samples: dict[str, StoredEmotionSample] = {}
        self._messages: dict[str, ChatMessage] = {}

    async def create_user(
        self,
        name: str,
        email: str | None = None,
        age: int | None = None,
        gender: str | None = None,
    ) -> User:
        user = User(name=name, email=email, age=age, gender=gender)
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_name(self, name: str) -> User | None:
        return next((u for u in self._users.values() if u.name == name), None)

    async def create_session(self, user_id: str | None = None) -> Session:
        session = Session(user_id=user_id)
        self._sessions[session.id] = session
        return session

    async def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def update_session(self, session_id: str, **updates: Any) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        updated = replace(session, **updates)
        self._sessions[session_id] = updated
        return updated

    async def get_active_session_for_user(self, user_id: str) -> Session | None:
        return next(
            (s for s in self._sessions.values() if s.user_id == user_id and s.is_active),
            None,
        )

    async def create_emotion_sample(
        self,
        session_id: str,
        sample: EmotionSample,
        confidence: int | None = None,
    ) -> StoredEmotionSample:
        stored = StoredEmotionSample(
            session_id=session_id,
            vector=sample.vector,
            captured_at=sample.captured_at,
            age=sample.age,
            gender=sample.gender,
            confidence=confidence,
        )
        self._samples[stored.id] = stored
        logger.debug("emotion_sample_stored", session_id=session_id, sample_id=stored.id)
        return stored

    async def list_emotion_samples(self, session_id: str) -> list[StoredEmotionSample]:
        return [s for s in self._samples.values() if s.session_id == session_id]

    async def create_message(
        self,
        session_id: str,
        is_user: bool,
        content: str,
        emotion_context: EmotionVector | None = None,
        provider: str | None = None,
    ) -> ChatMessage:
        message = ChatMessage(
            session_id=session_id,
            is_user=is_user,
            content=content,
            emotion_context=emotion_context,
            provider=provider,
        )
        self._messages[message.id] = message
        return message

    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        messages = [m for m in self._messages.values() if m.session_id == session_id]
        return sorted(messages, key=lambda m: m.timestamp)
