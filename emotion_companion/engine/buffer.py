"""
Emotion Sample Buffer.

Bounded, time-ordered buffer of the most recent detector samples.
"""
from datetime import datetime
from typing import Callable

from ..models.emotion import EmotionSample, EmotionVector, utcnow

DEFAULT_CAPACITY = 10
DEFAULT_WINDOW_MS = 30000


class EmotionSampleBuffer:
    """
    Keeps the last ``capacity`` samples in insertion order.

    The content is an immutable tuple that is swapped on every write, so a
    reader always sees either the old or the new buffer in full, including
    when writer and reader run on different threads.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._window_ms = window_ms
        self._clock = clock
        self._samples: tuple[EmotionSample, ...] = ()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def __len__(self) -> int:
        return len(self._samples)

    def snapshot(self) -> tuple[EmotionSample, ...]:
        """Current content, oldest first."""
        return self._samples

    def append(self, sample: EmotionSample) -> None:
        """Add a sample, evicting the oldest beyond capacity."""
        self._samples = (*self._samples, sample)[-self._capacity:]

    def latest(self) -> EmotionSample | None:
        samples = self._samples
        return samples[-1] if samples else None

    def windowed_average(self, window_ms: int | None = None) -> EmotionVector | None:
        """
        Per-channel mean over samples captured within the trailing window.

        Returns None when no sample falls inside the window.
        """
        if window_ms is None:
            window_ms = self._window_ms
        now = self._clock()
        selected = [
            sample.vector
            for sample in self._samples
            if (now - sample.captured_at).total_seconds() * 1000 <= window_ms
        ]
        return EmotionVector.mean(selected)

    def clear(self) -> None:
        self._samples = ()
