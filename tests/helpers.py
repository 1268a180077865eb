"""Test doubles shared by the test modules."""
import asyncio
from datetime import datetime, timedelta, timezone

from emotion_companion.models.emotion import EmotionVector
from emotion_companion.providers import ProviderDescriptor


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0.0, ms: float = 0.0) -> None:
        self.now += timedelta(seconds=seconds, milliseconds=ms)


class FakeProvider(ProviderDescriptor):
    """Scriptable provider that records every invocation."""

    def __init__(
        self,
        name: str,
        reply: str = "",
        configured: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
        guaranteed: bool = False,
    ) -> None:
        self.name = name
        self.reply = reply or f"reply from {name}"
        self.configured = configured
        self.error = error
        self.delay = delay
        self.guaranteed = guaranteed
        self.calls: list[tuple[str, EmotionVector]] = []

    def is_configured(self) -> bool:
        return self.configured

    async def _generate(self, message: str, vector: EmotionVector) -> str:
        self.calls.append((message, vector))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply
