"""
Emotion-aware prompt phrasing shared by the remote providers.

Each provider picks the pieces it needs; the wording itself is not part of
any contract.
"""
from ..engine.dominant import DominantChannel

SYSTEM_RULES = """Important rules:
- Be empathetic and understanding
- Offer practical, helpful advice
- Keep replies short and focused (100-150 words)
- Use emoji where it fits
- Avoid direct medical advice"""

_GUIDANCE: dict[str, dict[str, str]] = {
    "happy": {
        "high": "The user feels very happy. Share their joy and suggest ways to keep this positive state.",
        "low": "The user feels mildly happy. Encourage and support them.",
    },
    "sad": {
        "high": "The user feels deeply sad. Be very empathetic and offer emotional support and ideas for recovery.",
        "low": "The user feels a little sad. Listen to them and offer encouragement.",
    },
    "angry": {
        "high": "The user is very angry. Help them calm down and manage the anger in a healthy way.",
        "low": "The user is annoyed. Help them understand and handle the feeling.",
    },
    "fearful": {
        "high": "The user feels afraid or anxious. Reassure them and offer tips for overcoming the fear.",
    },
    "surprised": {
        "high": "The user is surprised. Help them process the new information or situation.",
    },
    "disgusted": {
        "high": "The user feels disgust or dissatisfaction. Help them deal with the feeling.",
    },
}

_DEFAULT_GUIDANCE = "The user is in a neutral state. Be friendly and helpful."

_FEELING_LABELS: dict[str, dict[str, str]] = {
    "happy": {"high": "great happiness", "low": "mild happiness"},
    "sad": {"high": "deep sadness", "low": "mild sadness"},
    "angry": {"high": "strong anger", "low": "mild annoyance"},
    "fearful": {"high": "fear and worry"},
    "surprised": {"high": "surprise"},
    "disgusted": {"high": "disgust"},
    "neutral": {"high": "a calm, neutral state"},
}

EMOTION_NAMES: dict[str, str] = {
    "happy": "happiness",
    "sad": "sadness",
    "angry": "anger",
    "surprised": "surprise",
    "fearful": "fear",
    "disgusted": "disgust",
    "neutral": "neutrality",
}


def _pick(table: dict[str, str], level: str) -> str:
    return table.get(level) or table["high"]


def guidance_for(dominant: DominantChannel) -> str:
    """Instruction describing how to respond to the dominant emotion."""
    table = _GUIDANCE.get(dominant.channel)
    if table is None:
        return _DEFAULT_GUIDANCE
    return _pick(table, dominant.level)


def feeling_label(dominant: DominantChannel) -> str:
    """Short noun phrase for the user's feeling."""
    table = _FEELING_LABELS.get(dominant.channel)
    if table is None:
        return "mixed feelings"
    return _pick(table, dominant.level)


def system_prompt(dominant: DominantChannel) -> str:
    return (
        "You are an emotionally intelligent assistant who understands how "
        f"users feel. {guidance_for(dominant)}\n\n{SYSTEM_RULES}"
    )
