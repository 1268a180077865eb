"""
Chat Service - emotion-aware replies.

1. Stores the user message with its emotion context
2. Resolves a reply through the provider chain
3. Stores the reply together with the provider that produced it
"""
from dataclasses import dataclass
from typing import Any

import structlog

from ..engine.dominant import resolve_dominant
from ..exceptions import SessionNotFoundError
from ..models.emotion import EmotionVector
from ..models.records import ChatMessage
from ..providers.chain import ProviderChain
from .monitor_service import MonitorService
from .storage import StorageBackend

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChatExchange:
    """A user message and the assistant's reply."""

    user_message: ChatMessage
    ai_message: ChatMessage
    provider: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_message": self.user_message.to_dict(),
            "ai_message": self.ai_message.to_dict(),
            "provider": self.provider,
        }


class ChatService:
    """Persists chat turns and resolves replies through the provider chain."""

    def __init__(
        self,
        storage: StorageBackend,
        chain: ProviderChain,
        monitor: MonitorService,
    ) -> None:
        self.storage = storage
        self.chain = chain
        self.monitor = monitor

    async def reply(
        self,
        session_id: str,
        content: str,
        emotion_context: EmotionVector | dict[str, Any] | None = None,
    ) -> ChatExchange:
        """
        Answer a user message.

        Args:
            session_id: Session the message belongs to
            content: The user's text
            emotion_context: Explicit context; defaults to the live buffer

        Returns:
            ChatExchange with both stored messages
        """
        session = await self.storage.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        if emotion_context is None:
            context = self.monitor.emotion_context(session_id)
        else:
            context = EmotionVector.from_mapping(emotion_context)

        user_message = await self.storage.create_message(
            session_id=session_id,
            is_user=True,
            content=content,
            emotion_context=context,
        )

        resolution = await self.chain.resolve(content, context)

        ai_message = await self.storage.create_message(
            session_id=session_id,
            is_user=False,
            content=resolution.response_text,
            emotion_context=context,
            provider=resolution.provider_name,
        )

        logger.info(
            "chat_reply",
            session_id=session_id,
            provider=resolution.provider_name,
            dominant=resolve_dominant(context).channel,
            failed_providers=[f.provider for f in resolution.failures],
        )

        return ChatExchange(
            user_message=user_message,
            ai_message=ai_message,
            provider=resolution.provider_name,
        )
