"""Local provider: canned empathetic replies, always available."""
import random

from ..engine.dominant import resolve_dominant
from ..models.emotion import EmotionVector
from .base import ProviderDescriptor

RESPONSES: dict[str, dict[str, list[str]]] = {
    "happy": {
        "high": [
            "Wonderful! I can feel how happy you are 😊 Moments like this deserve celebrating.",
            "What a lovely happiness you're feeling! 🌟 Enjoy every moment of it.",
            "Your happiness brightens my day! 😄 Tell me what made you feel this way.",
        ],
        "low": [
            "I love seeing you smile 😊 That's a good start to the day.",
            "A gentle, happy feeling 🌸 I hope it stays with you.",
            "I can sense your quiet positivity ✨ How can I help you today?",
        ],
    },
    "sad": {
        "high": [
            "I know things are hard for you right now 💙 You're not alone in this feeling.",
            "Sadness is part of life, and I'm here to listen 🤗",
            "I understand your pain, and I want you to know this feeling will pass 💪",
        ],
        "low": [
            "I sense a little sadness 💙 Would you like to talk about what's weighing on you?",
            "It seems your day isn't going great 🌙 I'm here if you want to talk.",
            "A bit of sadness is natural sometimes 💭 How about doing something that lifts your mood?",
        ],
    },
    "angry": {
        "high": [
            "I understand your anger, and it's a valid feeling 🔥 Let's talk about what's bothering you.",
            "Anger is strong, but we can handle it together 💪 Take a deep breath.",
            "I can see this affects you a lot 😤 Do you want to share what happened?",
        ],
        "low": [
            "I sense some irritation 😕 Is there something I can help with?",
            "Something seems to be bothering you a little 🤔 Tell me about it.",
            "Frustration is natural sometimes 💭 How can I support you?",
        ],
    },
}

DEFAULT_RESPONSES = [
    "I appreciate you sharing with me 😊 How can I help you today?",
    "I'm here to listen and help 🤗 What's on your mind?",
    "Thank you for trusting me 💙 Tell me how you feel and what you need.",
]

FOLLOW_UP = (
    "I understand your feelings and appreciate you sharing them with me. "
    "Would you like to talk more about how you feel?"
)

TIP = (
    "💡 Tip: add an AI provider API key in the settings to get richer replies."
)


class LocalProvider(ProviderDescriptor):
    """Guaranteed-success terminal provider."""

    name = "local"
    guaranteed = True

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def is_configured(self) -> bool:
        return True

    def candidates(self, vector: EmotionVector) -> list[str]:
        """Replies suitable for the vector's dominant emotion."""
        dominant = resolve_dominant(vector)
        table = RESPONSES.get(dominant.channel)
        if table is None:
            return DEFAULT_RESPONSES
        return table[dominant.level]

    async def _generate(self, message: str, vector: EmotionVector) -> str:
        reply = self._rng.choice(self.candidates(vector))
        return f"{reply}\n\n{FOLLOW_UP}\n\n{TIP}"
