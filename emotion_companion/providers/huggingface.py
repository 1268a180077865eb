"""Hugging Face inference API provider (raw HTTP)."""
from typing import Any

import httpx
import structlog

from ..engine.dominant import resolve_dominant
from ..exceptions import ProviderError
from ..models.emotion import EmotionVector
from .base import ProviderDescriptor
from .prompts import EMOTION_NAMES

logger = structlog.get_logger()

DEFAULT_URL = "https://api-inference.huggingface.co/models/microsoft/DialoGPT-medium"


class HuggingFaceProvider(ProviderDescriptor):
    """
    Text generation through the Hugging Face inference endpoint.

    A non-2xx status, an ``error`` field in the body, or a body without
    ``generated_text`` is reported as a failure.
    """

    name = "huggingface"

    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_URL,
        max_length: int = 150,
        temperature: float = 0.7,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.max_length = max_length
        self.temperature = temperature
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self.logger = logger.bind(provider=self.name)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def build_prompt(self, message: str, vector: EmotionVector) -> str:
        dominant = resolve_dominant(vector)
        emotion = EMOTION_NAMES.get(dominant.channel, dominant.channel)
        return (
            f"You are an empathetic assistant. The user is feeling {emotion}.\n"
            f'Their message: "{message}"\n'
            "Reply with empathy:"
        )

    async def _generate(self, message: str, vector: EmotionVector) -> str:
        prompt = self.build_prompt(message, vector)
        client = self._get_client()

        response = await client.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "inputs": prompt,
                "parameters": {
                    "max_length": self.max_length,
                    "temperature": self.temperature,
                    "do_sample": True,
                },
            },
        )
        response.raise_for_status()

        try:
            data: Any = response.json()
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON body: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(self.name, str(data["error"]))

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise ProviderError(self.name, "unexpected response shape")

        generated = data[0].get("generated_text")
        if not isinstance(generated, str):
            raise ProviderError(self.name, "missing generated_text")

        text = generated.replace(prompt, "").strip()
        self.logger.debug("huggingface_completion", text_length=len(text))
        return text

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
