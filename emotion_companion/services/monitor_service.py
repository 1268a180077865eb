"""
Monitor Service - live emotion state per session.

Owns one EmotionSampleBuffer per session, accepts detector readings (pushed
directly or pulled by a DetectionLoop), and provides the emotion context used
for prompts and the live display.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

import structlog

from ..config import Settings, get_settings
from ..engine.buffer import EmotionSampleBuffer
from ..engine.dominant import DominantChannel, resolve_dominant
from ..engine.sampling import DetectionLoop, Detector
from ..models.emotion import EmotionSample, EmotionVector, utcnow
from .storage import StorageBackend

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiveSummary:
    """What the live display shows for a session."""

    session_id: str
    sample_count: int
    latest: EmotionSample | None
    average: EmotionVector | None
    dominant: DominantChannel | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "sample_count": self.sample_count,
            "latest": self.latest.to_dict() if self.latest else None,
            "average": self.average.to_dict() if self.average else None,
            "dominant": self.dominant.to_dict() if self.dominant else None,
        }


class MonitorService:
    """Per-session buffers and detection loops."""

    def __init__(
        self,
        storage: StorageBackend,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.storage = storage
        self._settings = settings or get_settings()
        self._clock = clock
        self._buffers: dict[str, EmotionSampleBuffer] = {}
        self._loops: dict[str, DetectionLoop] = {}

    def buffer_for(self, session_id: str) -> EmotionSampleBuffer:
        """Get the session's buffer, creating it on first use."""
        buffer = self._buffers.get(session_id)
        if buffer is None:
            buffer = EmotionSampleBuffer(
                capacity=self._settings.buffer_capacity,
                window_ms=self._settings.window_ms,
                clock=self._clock,
            )
            self._buffers[session_id] = buffer
        return buffer

    def push_detection(
        self,
        session_id: str,
        vector: EmotionVector | dict[str, Any] | None,
        age: float | None = None,
        gender: str | None = None,
    ) -> EmotionSample:
        """Record a detector reading in the session's buffer."""
        sample = EmotionSample(
            vector=EmotionVector.from_mapping(vector),
            captured_at=self._clock(),
            age=age,
            gender=gender,
        )
        self.buffer_for(session_id).append(sample)
        return sample

    def live_summary(self, session_id: str) -> LiveSummary:
        buffer = self._buffers.get(session_id)
        if buffer is None:
            return LiveSummary(session_id, 0, None, None, None)

        latest = buffer.latest()
        average = buffer.windowed_average()

        if average is not None:
            dominant = resolve_dominant(average)
        elif latest is not None:
            dominant = resolve_dominant(latest.vector)
        else:
            dominant = None

        return LiveSummary(
            session_id=session_id,
            sample_count=len(buffer),
            latest=latest,
            average=average,
            dominant=dominant,
        )

    def emotion_context(self, session_id: str) -> EmotionVector:
        """Windowed average, else latest sample, else the neutral default."""
        buffer = self._buffers.get(session_id)
        if buffer is None:
            return EmotionVector.neutral_default()

        average = buffer.windowed_average()
        if average is not None:
            return average

        latest = buffer.latest()
        if latest is not None:
            return latest.vector
        return EmotionVector.neutral_default()

    async def start_detection(self, session_id: str, detector: Detector) -> DetectionLoop:
        """Start sampling the detector and auto-saving the latest sample."""
        loop = self._loops.get(session_id)
        if loop is not None and loop.running:
            return loop

        async def persist(sample: EmotionSample) -> None:
            await self.storage.create_emotion_sample(
                session_id, sample, confidence=self._settings.default_confidence
            )

        loop = DetectionLoop(
            buffer=self.buffer_for(session_id),
            detector=detector,
            sink=persist,
            sample_interval=self._settings.sample_interval_seconds,
            persist_interval=self._settings.persist_interval_seconds,
            clock=self._clock,
            session_id=session_id,
        )
        self._loops[session_id] = loop
        await loop.start()
        return loop

    async def stop_detection(self, session_id: str) -> None:
        """Stop the session's loop and drop its buffer."""
        loop = self._loops.pop(session_id, None)
        if loop is not None:
            await loop.stop()

        buffer = self._buffers.pop(session_id, None)
        if buffer is not None:
            buffer.clear()

    async def shutdown(self) -> None:
        for session_id in list(self._loops):
            await self.stop_detection(session_id)
        self._buffers.clear()
        logger.info("monitor_shutdown")
