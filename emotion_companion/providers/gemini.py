"""Google Gemini provider."""
from typing import Any

import structlog
from google import genai

from ..engine.dominant import resolve_dominant
from ..models.emotion import EmotionVector
from .base import ProviderDescriptor
from .prompts import feeling_label

logger = structlog.get_logger()


class GeminiProvider(ProviderDescriptor):
    """Gemini provider using the google-genai async client."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self._client = client
        self.logger = logger.bind(provider=self.name)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def build_prompt(self, message: str, vector: EmotionVector) -> str:
        dominant = resolve_dominant(vector)
        return (
            "You are an emotionally intelligent assistant. "
            f"The user is feeling {feeling_label(dominant)}.\n\n"
            f'User message: "{message}"\n\n'
            "Reply with empathy and something useful (100-150 words)."
        )

    async def _generate(self, message: str, vector: EmotionVector) -> str:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=self.build_prompt(message, vector),
        )
        text = response.text or ""

        self.logger.debug("gemini_completion", model=self.model, text_length=len(text))
        return text
