"""
Session statistics.

Statistics are derived from persisted samples and messages on every request
and never cached. The dominant emotion uses the same resolver as the live
display and the provider prompts.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Sequence

from ..engine.dominant import resolve_dominant
from ..exceptions import SessionNotFoundError
from ..models.emotion import CHANNELS, EmotionVector, utcnow
from ..models.records import ChatMessage, Session, StoredEmotionSample
from .storage import StorageBackend


@dataclass(frozen=True)
class SessionStats:
    """Summary of one session."""

    duration_seconds: int
    detection_count: int
    average_confidence_percent: int
    dominant_emotion: str
    message_count: int
    latest_vector: EmotionVector | None
    emotion_totals: dict[str, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration_seconds,
            "detections": self.detection_count,
            "average_confidence": self.average_confidence_percent,
            "dominant_emotion": self.dominant_emotion,
            "message_count": self.message_count,
            "latest_emotions": self.latest_vector.to_dict() if self.latest_vector else None,
            "emotion_totals": self.emotion_totals,
        }


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def session_duration(session: Session, now: datetime) -> int:
    """Whole seconds: running time if active, else start to end, else 0."""
    if session.is_active:
        return math.floor((now - session.start_time).total_seconds())
    if session.end_time is not None:
        return math.floor((session.end_time - session.start_time).total_seconds())
    return 0


def summarize(
    session: Session,
    samples: Sequence[StoredEmotionSample],
    messages: Sequence[ChatMessage],
    now: datetime,
) -> SessionStats:
    """Pure computation of session statistics."""
    detection_count = len(samples)

    if samples:
        confidence_sum = sum(s.confidence or 0 for s in samples)
        average_confidence = _round_half_up(confidence_sum / detection_count)
    else:
        average_confidence = 0

    totals = {name: 0.0 for name in CHANNELS}
    for sample in samples:
        for name, value in EmotionVector.from_mapping(sample.vector).channels():
            totals[name] += value

    # built directly so overflowed totals are not treated as malformed
    dominant = resolve_dominant(EmotionVector(**totals)).channel if samples else "neutral"

    latest_vector = None
    if samples:
        # later insertion wins on equal timestamps
        latest_index = max(
            range(detection_count),
            key=lambda i: (samples[i].captured_at, i),
        )
        latest_vector = samples[latest_index].vector

    return SessionStats(
        duration_seconds=session_duration(session, now),
        detection_count=detection_count,
        average_confidence_percent=average_confidence,
        dominant_emotion=dominant,
        message_count=len(messages),
        latest_vector=latest_vector,
        emotion_totals=totals,
    )


class SessionStatisticsAggregator:
    """Recomputes SessionStats from the storage backend on demand."""

    def __init__(
        self,
        storage: StorageBackend,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.storage = storage
        self._clock = clock

    async def compute(self, session_id: str) -> SessionStats:
        session = await self.storage.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        samples = await self.storage.list_emotion_samples(session_id)
        messages = await self.storage.list_messages(session_id)
        return summarize(session, samples, messages, self._clock())
