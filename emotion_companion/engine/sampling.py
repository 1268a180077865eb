"""
Detection loop.

Drives two independent periodic tasks for one session:
- sampling tick: asks the detector for a reading and appends it to the buffer
- persistence tick: forwards the buffer's latest sample to a sink

Both tasks share one cancellation token. Once ``stop()`` has set it, neither
task invokes the detector or the sink again.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Protocol

import structlog

from ..models.emotion import EmotionSample, EmotionVector, utcnow
from .buffer import EmotionSampleBuffer

logger = structlog.get_logger()

SampleSink = Callable[[EmotionSample], Awaitable[None]]


@dataclass(frozen=True)
class Detection:
    """Raw detector output."""

    vector: EmotionVector
    age: float | None = None
    gender: str | None = None


class Detector(Protocol):
    """Anything that can produce a detection on demand."""

    async def detect(self) -> Detection | None:
        ...


class DetectionLoop:
    """Sampling and persistence ticks sharing one buffer."""

    def __init__(
        self,
        buffer: EmotionSampleBuffer,
        detector: Detector,
        sink: SampleSink | None = None,
        sample_interval: float = 0.5,
        persist_interval: float = 5.0,
        clock: Callable[[], datetime] = utcnow,
        session_id: str | None = None,
    ) -> None:
        self.buffer = buffer
        self.detector = detector
        self.sink = sink
        self.sample_interval = sample_interval
        self.persist_interval = persist_interval
        self._clock = clock
        self._stop = asyncio.Event()
        self._tasks: list[asyncio.Task[None]] = []
        self.logger = logger.bind(session_id=session_id)

    @property
    def running(self) -> bool:
        return bool(self._tasks) and not self._stop.is_set()

    async def start(self) -> None:
        """Start both ticks. No-op if already running."""
        if self.running:
            return
        self._stop = asyncio.Event()
        self._tasks = [
            asyncio.create_task(self._run(self.sample_interval, self._sample_once)),
        ]
        if self.sink is not None:
            self._tasks.append(
                asyncio.create_task(self._run(self.persist_interval, self._persist_once))
            )
        self.logger.info(
            "detection_started",
            sample_interval=self.sample_interval,
            persist_interval=self.persist_interval,
        )

    async def stop(self) -> None:
        """Signal the token, cancel both ticks and wait for them."""
        self._stop.set()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            self.logger.info("detection_stopped")

    async def _run(self, interval: float, tick: Callable[[], Awaitable[None]]) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            if self._stop.is_set():
                return
            await tick()

    async def _sample_once(self) -> None:
        try:
            detection = await self.detector.detect()
        except Exception as e:
            self.logger.warning("detection_failed", error=str(e))
            return

        if detection is None or self._stop.is_set():
            return

        self.buffer.append(
            EmotionSample(
                vector=EmotionVector.from_mapping(detection.vector),
                captured_at=self._clock(),
                age=detection.age,
                gender=detection.gender,
            )
        )

    async def _persist_once(self) -> None:
        sample = self.buffer.latest()
        if sample is None or self.sink is None:
            return
        try:
            await self.sink(sample)
        except Exception as e:
            self.logger.warning("sample_persist_failed", error=str(e))
