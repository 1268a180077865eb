"""OpenAI chat completions provider."""
from typing import Any

import structlog
from openai import AsyncOpenAI

from ..engine.dominant import resolve_dominant
from ..exceptions import ProviderError
from ..models.emotion import EmotionVector
from .base import ProviderDescriptor
from .prompts import system_prompt

logger = structlog.get_logger()


class OpenAIProvider(ProviderDescriptor):
    """
    OpenAI provider using the official async SDK.

    The client is created on first use so an unconfigured provider never
    touches the SDK.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        max_tokens: int = 200,
        temperature: float = 0.7,
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client
        self.logger = logger.bind(provider=self.name)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _generate(self, message: str, vector: EmotionVector) -> str:
        dominant = resolve_dominant(vector)
        client = self._get_client()

        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt(dominant)},
                {"role": "user", "content": message},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        if not response.choices:
            raise ProviderError(self.name, "response has no choices")
        text = response.choices[0].message.content or ""

        self.logger.debug(
            "openai_completion",
            model=self.model,
            dominant=dominant.channel,
            tokens=response.usage.total_tokens if response.usage else 0,
        )
        return text

    async def close(self) -> None:
        if isinstance(self._client, AsyncOpenAI):
            await self._client.close()
