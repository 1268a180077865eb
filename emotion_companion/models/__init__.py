"""Data models for the Emotion Companion service."""
from .emotion import CHANNELS, EmotionSample, EmotionVector, utcnow
from .records import ChatMessage, Session, StoredEmotionSample, User

__all__ = [
    "CHANNELS",
    "EmotionSample",
    "EmotionVector",
    "utcnow",
    "ChatMessage",
    "Session",
    "StoredEmotionSample",
    "User",
]
