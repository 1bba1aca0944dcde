"""
LLM module - backend adapters and the backend registry.
"""

from typing import Dict, Type

from .provider import (
    IBackendAdapter,
    BaseBackendAdapter,
    HTTPBackendAdapter,
    ModelInfo,
    ModelProvider,
    Message,
)
from .openai_compatible import OpenAICompatibleAdapter, GroqAdapter, GitHubModelsAdapter
from .ollama_provider import OllamaAdapter
from .gemini_provider import GeminiAdapter
from .anthropic_provider import AnthropicAdapter
from ..config import BackendSettings, EngineConfig
from ..errors import UnknownBackend


BACKEND_REGISTRY: Dict[str, Type[BaseBackendAdapter]] = {
    ModelProvider.GROQ.value: GroqAdapter,
    ModelProvider.GITHUB.value: GitHubModelsAdapter,
    ModelProvider.OLLAMA.value: OllamaAdapter,
    ModelProvider.GEMINI.value: GeminiAdapter,
    ModelProvider.ANTHROPIC.value: AnthropicAdapter,
}


def create_backend(config: EngineConfig) -> IBackendAdapter:
    """
    Factory function to create the configured backend adapter.

    Args:
        config: Engine configuration; ``config.backend`` selects the adapter

    Returns:
        IBackendAdapter instance

    Raises:
        UnknownBackend: If the backend identifier has no registered adapter
    """
    backend = config.backend.lower()
    adapter_cls = BACKEND_REGISTRY.get(backend)
    if adapter_cls is None:
        raise UnknownBackend(backend, sorted(BACKEND_REGISTRY))

    settings = config.backends.get(backend)
    if settings is None:
        raise UnknownBackend(backend, sorted(config.backends))

    return adapter_cls(settings)


__all__ = [
    # Base classes
    "IBackendAdapter",
    "BaseBackendAdapter",
    "HTTPBackendAdapter",
    "ModelInfo",
    "ModelProvider",
    "Message",
    "BackendSettings",
    # Adapters
    "OpenAICompatibleAdapter",
    "GroqAdapter",
    "GitHubModelsAdapter",
    "OllamaAdapter",
    "GeminiAdapter",
    "AnthropicAdapter",
    # Registry
    "BACKEND_REGISTRY",
    "create_backend",
]
