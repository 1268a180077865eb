"""Reply providers and the failover chain."""
from .base import ProviderDescriptor, ProviderResult
from .chain import (
    ProviderChain,
    ProviderTestResult,
    ResolutionResult,
    create_provider_chain,
)
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider
from .local import LocalProvider
from .openai import OpenAIProvider

__all__ = [
    "ProviderDescriptor",
    "ProviderResult",
    "ProviderChain",
    "ProviderTestResult",
    "ResolutionResult",
    "create_provider_chain",
    "GeminiProvider",
    "HuggingFaceProvider",
    "LocalProvider",
    "OpenAIProvider",
]
