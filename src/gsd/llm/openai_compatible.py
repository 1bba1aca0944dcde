"""
OpenAI-compatible chat completion backends (Groq, GitHub Models).
"""

import logging
from typing import List, Dict, Any

from .provider import HTTPBackendAdapter, Message, ModelProvider
from ..errors import ProviderError

logger = logging.getLogger(__name__)


class OpenAICompatibleAdapter(HTTPBackendAdapter):
    """
    Adapter for ``/chat/completions`` endpoints with a bearer token.

    Request body: model, messages, temperature, max_tokens.
    Response: choices[0].message.content.
    """

    api_key_env = "API_KEY"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self._require_api_key(self.api_key_env)}"
        return headers

    def _build_payload(self, messages: List[Message]) -> Dict[str, Any]:
        return {
            "model": self.model_id,
            "messages": self._format_messages(messages),
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }

    def _extract_content(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProviderError(f"{self.provider.value} response has no choices")

        if not isinstance(choices[0], dict):
            raise ProviderError(f"{self.provider.value} response has a malformed choice")

        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise ProviderError(f"{self.provider.value} response has a malformed message")
        content = message.get("content")

        usage = data.get("usage")
        if isinstance(usage, dict):
            logger.debug(
                f"Token usage: prompt={usage.get('prompt_tokens')}, "
                f"completion={usage.get('completion_tokens')}"
            )

        return content if isinstance(content, str) else ""


class GroqAdapter(OpenAICompatibleAdapter):
    """Groq cloud chat completions"""
    provider = ModelProvider.GROQ
    api_key_env = "GROQ_API_KEY"


class GitHubModelsAdapter(OpenAICompatibleAdapter):
    """GitHub Models inference endpoint"""
    provider = ModelProvider.GITHUB
    api_key_env = "GITHUB_TOKEN"
