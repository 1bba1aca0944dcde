"""
Anthropic (Claude) backend using the anthropic SDK.
"""

import logging
from typing import List, Any, Optional
import anthropic

from .provider import BaseBackendAdapter, Message, ModelProvider
from ..config import BackendSettings
from ..errors import AuthError, ProviderError, TransportError

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseBackendAdapter):
    """
    Adapter for Claude models via the Messages API.

    The SDK's own retries are disabled so the engine's retry policy is the
    only one in effect.
    """

    provider = ModelProvider.ANTHROPIC

    def __init__(self, settings: BackendSettings, client: Optional[Any] = None):
        super().__init__(settings)
        self.client = client or anthropic.AsyncAnthropic(
            api_key=self._require_api_key("ANTHROPIC_API_KEY"),
            base_url=settings.api_url,
            timeout=settings.timeout,
            max_retries=0
        )
        logger.info(f"Anthropic backend initialized with model: {self.model_id}")

    async def send(self, messages: List[Message]) -> str:
        logger.debug(f"Creating message with {len(messages)} messages, "
                     f"max_tokens={self.settings.max_tokens}")

        try:
            response = await self.client.messages.create(
                model=self.model_id,
                messages=self._format_messages(messages),
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise AuthError(str(e)) from e
        except anthropic.RateLimitError as e:
            raise ProviderError(str(e), retryable=True, status_code=e.status_code) from e
        except anthropic.APIStatusError as e:
            raise ProviderError(str(e), retryable=False, status_code=e.status_code) from e
        except anthropic.APIConnectionError as e:
            raise TransportError(f"anthropic request failed: {e}") from e

        if getattr(response, "usage", None) is not None:
            logger.debug(f"Token usage: input={response.usage.input_tokens}, "
                         f"output={response.usage.output_tokens}")

        return "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )

    async def close(self) -> None:
        await self.client.close()
