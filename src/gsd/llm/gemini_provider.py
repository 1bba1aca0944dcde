"""
Google Gemini backend using the google-genai SDK.
"""

import logging
from typing import List, Dict, Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .provider import BaseBackendAdapter, Message, ModelProvider, classify_http_error
from ..config import BackendSettings
from ..errors import TransportError

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseBackendAdapter):
    """
    Adapter for Gemini models.

    Conversation roles map user -> "user" and assistant -> "model".
    """

    provider = ModelProvider.GEMINI

    def __init__(self, settings: BackendSettings, client: Optional[Any] = None):
        super().__init__(settings)
        self.client = client or genai.Client(api_key=self._require_api_key("GEMINI_API_KEY"))
        logger.info(f"Gemini backend initialized with model: {self.model_id}")

    def _format_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        return [
            {
                "role": "model" if message.role == "assistant" else "user",
                "parts": [{"text": message.content}]
            }
            for message in messages
        ]

    async def send(self, messages: List[Message]) -> str:
        config = types.GenerateContentConfig(
            temperature=self.settings.temperature,
            max_output_tokens=self.settings.max_tokens,
        )

        logger.debug(f"Creating Gemini message with {len(messages)} messages, "
                     f"max_tokens={self.settings.max_tokens}")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_id,
                contents=self._format_messages(messages),
                config=config
            )
        except genai_errors.APIError as e:
            raise classify_http_error(e.code or 0, e.message or str(e)) from e
        except httpx.TransportError as e:
            raise TransportError(f"gemini request failed: {e}") from e

        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            logger.debug(f"Token usage: input={usage.prompt_token_count}, "
                         f"output={usage.candidates_token_count}")

        return response.text or ""
