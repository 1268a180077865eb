"""Exceptions raised by the Emotion Companion core."""


class EmotionCompanionError(Exception):
    """Base class for service errors."""


class ProviderError(EmotionCompanionError):
    """A text-generation provider failed to produce a reply."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderChainExhaustedError(EmotionCompanionError):
    """Every provider failed, including the guaranteed fallback."""


class ProviderNotFoundError(EmotionCompanionError):
    """No provider is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown provider: {name}")
        self.name = name


class SessionNotFoundError(EmotionCompanionError):
    """The requested session does not exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
