"""
Session Service - users and monitoring sessions.

Handles:
- Get-or-create users by name
- Starting a session (ending the user's previous active one)
- Ending sessions
"""
import structlog

from ..exceptions import SessionNotFoundError
from ..models.emotion import utcnow
from ..models.records import Session, User
from .storage import StorageBackend

logger = structlog.get_logger()


class SessionService:
    """User and session lifecycle on top of the storage backend."""

    def __init__(self, storage: StorageBackend) -> None:
        self.storage = storage

    async def get_or_create_user(
        self,
        name: str,
        email: str | None = None,
        age: int | None = None,
        gender: str | None = None,
    ) -> User:
        """Return the user with this name, creating it if needed."""
        existing = await self.storage.get_user_by_name(name)
        if existing is not None:
            return existing

        user = await self.storage.create_user(name=name, email=email, age=age, gender=gender)
        logger.info("user_created", user_id=user.id)
        return user

    async def start_session(self, user_id: str | None = None) -> Session:
        """
        Start a new session.

        A user has at most one active session; the previous one is ended.
        """
        if user_id is not None:
            previous = await self.storage.get_active_session_for_user(user_id)
            if previous is not None:
                await self.end_session(previous.id)

        session = await self.storage.create_session(user_id=user_id)
        logger.info("session_created", session_id=session.id, user_id=user_id)
        return session

    async def get_session(self, session_id: str) -> Session:
        session = await self.storage.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def end_session(self, session_id: str) -> Session:
        """Mark a session inactive. Ending an ended session is a no-op."""
        session = await self.get_session(session_id)
        if not session.is_active:
            return session

        updated = await self.storage.update_session(
            session_id, is_active=False, end_time=utcnow()
        )
        if updated is None:
            raise SessionNotFoundError(session_id)
        logger.info("session_ended", session_id=session_id)
        return updated
