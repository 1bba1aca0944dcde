"""
Ollama backend for local models.
"""

import logging
from typing import List, Dict, Any

from .provider import HTTPBackendAdapter, Message, ModelProvider
from ..errors import TransportError

logger = logging.getLogger(__name__)


class OllamaAdapter(HTTPBackendAdapter):
    """
    Adapter for Ollama's ``/api/chat`` endpoint.

    No authentication is needed for a local server. Generation parameters go
    in ``options`` (``temperature``, ``num_predict``) and streaming is disabled
    so the whole reply comes back in one body.
    """

    provider = ModelProvider.OLLAMA

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_payload(self, messages: List[Message]) -> Dict[str, Any]:
        return {
            "model": self.model_id,
            "messages": self._format_messages(messages),
            "stream": False,
            "options": {
                "temperature": self.settings.temperature,
                "num_predict": self.settings.max_tokens
            }
        }

    def _extract_content(self, data: Dict[str, Any]) -> str:
        if "prompt_eval_count" in data:
            logger.debug(f"Token usage: prompt={data.get('prompt_eval_count')}, "
                         f"completion={data.get('eval_count')}")

        message = data.get("message") or {}
        content = message.get("content")
        if not content:
            # An empty body usually means the server is up but the model did not load
            raise TransportError(
                "Empty response from Ollama. Is Ollama running? (ollama serve)"
            )
        return content
