"""Services for the Emotion Companion."""
from .chat_service import ChatExchange, ChatService
from .monitor_service import LiveSummary, MonitorService
from .session_service import SessionService
from .stats_service import SessionStatisticsAggregator, SessionStats, summarize
from .storage import InMemoryStorage, StorageBackend

__all__ = [
    "ChatExchange",
    "ChatService",
    "LiveSummary",
    "MonitorService",
    "SessionService",
    "SessionStatisticsAggregator",
    "SessionStats",
    "summarize",
    "InMemoryStorage",
    "StorageBackend",
]
