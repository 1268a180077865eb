"""
Dominant channel resolution.

Used identically by provider prompts, the live summary and session
statistics, so all three always agree on "the" emotion of a vector.
"""
from dataclasses import dataclass
from typing import Any, Mapping

from ..models.emotion import EmotionVector

HIGH_INTENSITY_THRESHOLD = 60.0


@dataclass(frozen=True)
class DominantChannel:
    """Highest-intensity channel of a vector."""

    channel: str
    value: float

    @property
    def level(self) -> str:
        return intensity_level(self.value)

    def to_dict(self) -> dict[str, Any]:
        return {"channel": self.channel, "value": round(self.value, 2)}


def intensity_level(value: float) -> str:
    """'high' above the threshold, otherwise 'low'."""
    return "high" if value > HIGH_INTENSITY_THRESHOLD else "low"


def resolve_dominant(vector: EmotionVector | Mapping[str, Any] | None) -> DominantChannel:
    """
    Resolve the dominant channel of a vector.

    Channels are scanned in canonical order and the running best is only
    replaced by a strictly greater value, so on a tie the earlier channel
    wins. Malformed input resolves as the neutral default.
    """
    normalized = EmotionVector.from_mapping(vector)
    channels = normalized.channels()

    best_name, best_value = channels[0]
    for name, value in channels[1:]:
        if value > best_value:
            best_name, best_value = name, value

    return DominantChannel(channel=best_name, value=best_value)
