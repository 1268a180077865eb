"""
Emotion vector and sample types.

The seven channels and their order are shared by the live buffer, the
provider prompts and the session statistics. Channel order is canonical:
dominant-channel resolution breaks ties by it.
"""
import math
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping

CHANNELS: tuple[str, ...] = (
    "happy",
    "sad",
    "angry",
    "surprised",
    "fearful",
    "disgusted",
    "neutral",
)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EmotionVector:
    """Seven independent intensity channels, conventionally 0-100."""

    happy: float = 0.0
    sad: float = 0.0
    angry: float = 0.0
    surprised: float = 0.0
    fearful: float = 0.0
    disgusted: float = 0.0
    neutral: float = 0.0

    def channels(self) -> list[tuple[str, float]]:
        """(name, value) pairs in canonical order."""
        return [(name, getattr(self, name)) for name in CHANNELS]

    def to_dict(self) -> dict[str, float]:
        return {name: value for name, value in self.channels()}

    @classmethod
    def neutral_default(cls) -> "EmotionVector":
        return cls(neutral=100.0)

    @classmethod
    def from_mapping(cls, data: Any) -> "EmotionVector":
        """
        Build a vector from untrusted input.

        Missing channels count as 0 and unknown keys are ignored. Input that
        is not a mapping, is empty, has no known channel, or has a
        non-numeric or non-finite value for a known channel is malformed and
        yields the neutral default. Never raises.
        """
        if isinstance(data, EmotionVector):
            return data
        if not isinstance(data, Mapping) or not data:
            return cls.neutral_default()

        values: dict[str, float] = {}
        for name in CHANNELS:
            if name not in data:
                continue
            raw = data[name]
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                return cls.neutral_default()
            try:
                value = float(raw)
            except OverflowError:
                return cls.neutral_default()
            if not math.isfinite(value):
                return cls.neutral_default()
            values[name] = value

        if not values:
            return cls.neutral_default()
        return cls(**values)

    @classmethod
    def mean(cls, vectors: list["EmotionVector"]) -> "EmotionVector | None":
        """Per-channel arithmetic mean, or None for an empty list."""
        if not vectors:
            return None
        count = len(vectors)
        return cls(**{
            f.name: sum(getattr(v, f.name) for v in vectors) / count
            for f in fields(cls)
        })


@dataclass(frozen=True)
class EmotionSample:
    """One detector reading, immutable once created."""

    vector: EmotionVector
    captured_at: datetime
    age: float | None = None
    gender: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "emotions": self.vector.to_dict(),
            "captured_at": self.captured_at.isoformat(),
            "age": self.age,
            "gender": self.gender,
        }
