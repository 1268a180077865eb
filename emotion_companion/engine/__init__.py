"""
Live emotion engine components.

- EmotionSampleBuffer: bounded buffer of recent samples with windowed averages
- resolve_dominant: deterministic dominant channel of a vector
- DetectionLoop: cancellable sampling and persistence ticks
"""
from .buffer import EmotionSampleBuffer
from .dominant import DominantChannel, intensity_level, resolve_dominant
from .sampling import Detection, DetectionLoop, Detector

__all__ = [
    "EmotionSampleBuffer",
    "DominantChannel",
    "intensity_level",
    "resolve_dominant",
    "Detection",
    "DetectionLoop",
    "Detector",
]
