"""
Provider chain - ordered failover across reply providers.

Providers are tried in priority order. Unconfigured providers are skipped
without being invoked; a failing provider is logged and the next one is
tried. Each provider is attempted at most once per ``resolve`` call and no
two providers are ever called concurrently.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx
import structlog

from ..config import Settings
from ..exceptions import ProviderChainExhaustedError, ProviderNotFoundError
from ..models.emotion import EmotionVector
from .base import ProviderDescriptor, ProviderResult
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider
from .local import LocalProvider
from .openai import OpenAIProvider

logger = structlog.get_logger()

AUTO = "auto"


@dataclass(frozen=True)
class ResolutionResult:
    """Reply text plus the provider that produced it."""

    response_text: str
    provider_name: str
    failures: tuple[ProviderResult, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response_text,
            "provider": self.provider_name,
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass(frozen=True)
class ProviderTestResult:
    """Outcome of a manual provider check."""

    success: bool
    provider: str
    response_time_ms: float
    response: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "provider": self.provider,
            "response": self.response,
            "error": self.error,
            "response_time_ms": round(self.response_time_ms, 2),
        }


class ProviderChain:
    """
    Ordered registry of reply providers.

    Usage:
        chain = ProviderChain([OpenAIProvider(key), LocalProvider()])
        result = await chain.resolve("hello", vector)
        print(result.provider_name, result.response_text)
    """

    def __init__(
        self,
        providers: Sequence[ProviderDescriptor],
        timeout_seconds: float | None = None,
    ) -> None:
        guaranteed = [p for p in providers if p.guaranteed]
        if not guaranteed:
            raise ValueError("Provider chain requires a guaranteed-success provider")

        names = [p.name for p in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider names: {names}")

        self._providers: tuple[ProviderDescriptor, ...] = tuple(providers)
        self._fallback = guaranteed[-1]
        self.timeout_seconds = timeout_seconds

    @property
    def providers(self) -> tuple[ProviderDescriptor, ...]:
        return self._providers

    async def _attempt(
        self,
        provider: ProviderDescriptor,
        message: str,
        vector: EmotionVector,
    ) -> ProviderResult:
        """Invoke one provider; every problem becomes a failure result."""
        start = time.perf_counter()
        try:
            if self.timeout_seconds is not None:
                return await asyncio.wait_for(
                    provider.generate(message, vector), timeout=self.timeout_seconds
                )
            return await provider.generate(message, vector)
        except asyncio.TimeoutError:
            error = f"timed out after {self.timeout_seconds}s"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
        return ProviderResult.failure(
            provider.name, error, (time.perf_counter() - start) * 1000
        )

    async def resolve(
        self,
        message: str,
        vector: EmotionVector | Mapping[str, Any] | None,
    ) -> ResolutionResult:
        """
        Produce a reply from the highest-priority working provider.

        Args:
            message: The user's message
            vector: Emotion context; malformed input is treated as neutral

        Returns:
            ResolutionResult naming the provider that answered

        Raises:
            ProviderChainExhaustedError: only if the guaranteed provider fails
        """
        context = EmotionVector.from_mapping(vector)
        failures: list[ProviderResult] = []
        attempted: set[str] = set()

        for provider in self._providers:
            if not provider.is_configured():
                logger.debug("provider_skipped", provider=provider.name)
                continue

            logger.info("provider_attempt", provider=provider.name)
            attempted.add(provider.name)
            result = await self._attempt(provider, message, context)

            if result.ok:
                logger.info(
                    "provider_succeeded",
                    provider=provider.name,
                    latency_ms=round(result.latency_ms, 2),
                    failed_before=len(failures),
                )
                return ResolutionResult(
                    response_text=result.text,
                    provider_name=provider.name,
                    failures=tuple(failures),
                )

            logger.warning(
                "provider_failed",
                provider=provider.name,
                error=result.error,
                latency_ms=round(result.latency_ms, 2),
            )
            failures.append(result)

        if self._fallback.name not in attempted:
            result = await self._attempt(self._fallback, message, context)
            if result.ok:
                return ResolutionResult(
                    response_text=result.text,
                    provider_name=self._fallback.name,
                    failures=tuple(failures),
                )
            failures.append(result)

        logger.error(
            "provider_chain_exhausted",
            failures=[f.to_dict() for f in failures],
        )
        raise ProviderChainExhaustedError(
            f"All providers failed, including {self._fallback.name}"
        )

    def list_providers(self) -> list[dict[str, Any]]:
        """Status snapshot; does not invoke any provider."""
        return [
            {"name": provider.name, "configured": provider.is_configured()}
            for provider in self._providers
        ]

    def get_provider(self, name: str) -> ProviderDescriptor:
        for provider in self._providers:
            if provider.name == name:
                return provider
        raise ProviderNotFoundError(name)

    async def test_provider(
        self,
        name: str,
        message: str,
        vector: EmotionVector | Mapping[str, Any] | None,
    ) -> ProviderTestResult:
        """
        Check a single provider, or the whole chain when name is "auto".

        An unconfigured provider is reported as failed without being invoked.
        """
        context = EmotionVector.from_mapping(vector)
        start = time.perf_counter()

        if name == AUTO:
            resolution = await self.resolve(message, context)
            return ProviderTestResult(
                success=True,
                provider=resolution.provider_name,
                response=resolution.response_text,
                response_time_ms=(time.perf_counter() - start) * 1000,
            )

        provider = self.get_provider(name)
        if not provider.is_configured():
            return ProviderTestResult(
                success=False,
                provider=provider.name,
                error="not configured",
                response_time_ms=0.0,
            )

        result = await self._attempt(provider, message, context)
        logger.info(
            "provider_tested",
            provider=provider.name,
            success=result.ok,
            error=result.error,
        )
        return ProviderTestResult(
            success=result.ok,
            provider=provider.name,
            response=result.text if result.ok else None,
            error=result.error,
            response_time_ms=(time.perf_counter() - start) * 1000,
        )

    async def close(self) -> None:
        """Release provider resources."""
        for provider in self._providers:
            try:
                await provider.close()
            except Exception as e:
                logger.error("provider_close_error", provider=provider.name, error=str(e))


def create_provider_chain(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> ProviderChain:
    """
    Build the chain from settings, in ``settings.provider_order``.

    Unknown names are ignored with a warning. The local provider is appended
    when the configured order leaves it out.
    """
    credentials = settings.credentials()
    factories = {
        "gemini": lambda: GeminiProvider(
            api_key=credentials.gemini_api_key,
            model=settings.gemini_model,
        ),
        "openai": lambda: OpenAIProvider(
            api_key=credentials.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
        ),
        "huggingface": lambda: HuggingFaceProvider(
            api_key=credentials.huggingface_api_key,
            url=settings.huggingface_url,
            max_length=settings.huggingface_max_length,
            temperature=settings.huggingface_temperature,
            timeout=settings.provider_timeout_seconds,
            client=http_client,
        ),
        "local": LocalProvider,
    }

    providers: list[ProviderDescriptor] = []
    seen: set[str] = set()
    for name in settings.provider_order:
        key = name.strip().lower()
        if key in seen:
            continue
        factory = factories.get(key)
        if factory is None:
            logger.warning("unknown_provider_in_order", provider=name)
            continue
        providers.append(factory())
        seen.add(key)

    if "local" not in seen:
        providers.append(LocalProvider())

    chain = ProviderChain(providers, timeout_seconds=settings.provider_timeout_seconds)
    logger.info("provider_chain_created", providers=chain.list_providers())
    return chain
