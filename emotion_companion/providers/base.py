"""
Base provider interface.

A provider turns a user message plus an emotion vector into a reply. The
public ``generate`` never raises for an invocation problem: it reports a
``ProviderResult`` failure instead, and the chain decides what to do next.
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import structlog

from ..models.emotion import EmotionVector

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider invocation."""

    provider: str
    ok: bool
    text: str = ""
    error: str | None = None
    latency_ms: float = 0.0

    @classmethod
    def success(cls, provider: str, text: str, latency_ms: float = 0.0) -> "ProviderResult":
        return cls(provider=provider, ok=True, text=text, latency_ms=latency_ms)

    @classmethod
    def failure(cls, provider: str, error: str, latency_ms: float = 0.0) -> "ProviderResult":
        return cls(provider=provider, ok=False, error=error, latency_ms=latency_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "ok": self.ok,
            "error": self.error,
            "latency_ms": round(self.latency_ms, 2),
        }


class ProviderDescriptor(ABC):
    """
    Abstract base class for reply providers.

    Implementations should handle:
    - Credential gating via ``is_configured``
    - Prompt construction from the dominant emotion
    - Mapping transport and response errors to exceptions in ``_generate``
    """

    name: str = "provider"
    # True only for the terminal provider that cannot fail
    guaranteed: bool = False

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for this provider are present."""

    @abstractmethod
    async def _generate(self, message: str, vector: EmotionVector) -> str:
        """
        Produce a reply or raise.

        Args:
            message: The user's message
            vector: Normalized emotion context

        Returns:
            Reply text
        """

    async def generate(self, message: str, vector: EmotionVector) -> ProviderResult:
        """Invoke the provider once and report the outcome."""
        start = time.perf_counter()
        try:
            text = await self._generate(message, vector)
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return ProviderResult.failure(
                self.name, f"{type(e).__name__}: {e}", latency_ms
            )

        latency_ms = (time.perf_counter() - start) * 1000
        if not text or not text.strip():
            return ProviderResult.failure(self.name, "empty response", latency_ms)
        return ProviderResult.success(self.name, text.strip(), latency_ms)

    async def close(self) -> None:
        """Clean up resources."""
        pass
