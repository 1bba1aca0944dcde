"""
Backend adapter abstraction layer.

Provides a uniform interface over chat-completion backends (Groq, GitHub Models,
Ollama, Gemini, Anthropic): send the conversation, get the assistant text back.
Every adapter classifies its failures into the shared error taxonomy so the
retry policy and agent loop stay adapter-agnostic.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Dict, Any, Optional
from enum import Enum

import httpx

from ..config import BackendSettings
from ..errors import AuthError, BackendError, ProviderError, TransportError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
AUTH_STATUS_CODES = {401, 403}


class ModelProvider(Enum):
    """Supported backends"""
    GROQ = "groq"
    GITHUB = "github"
    OLLAMA = "ollama"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


@dataclass
class ModelInfo:
    """Information about the configured model"""
    id: str
    name: str
    provider: ModelProvider


@dataclass
class Message:
    """One conversation message"""
    role: str  # "user" or "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class IBackendAdapter(ABC):
    """
    Base interface for backend adapters.

    All adapters must implement this interface to be usable by the agent loop.
    """

    @property
    @abstractmethod
    def model_info(self) -> ModelInfo:
        """Get information about the model"""
        pass

    @abstractmethod
    async def send(self, messages: List[Message]) -> str:
        """
        Send the full conversation and return the assistant text.

        Raises:
            TransportError: network/connection failure
            AuthError: missing or rejected credential
            ProviderError: structured provider error (retryable if rate limited)
        """
        pass

    async def close(self) -> None:
        """Release network resources"""
        pass


class BaseBackendAdapter(IBackendAdapter):
    """
    Base implementation with common functionality.

    Subclasses implement provider-specific request and response shapes.
    """

    provider: ModelProvider

    def __init__(self, settings: BackendSettings):
        self.settings = settings
        self.model_id = settings.model
        self.api_key = settings.api_key
        self._validate_config()

    def _validate_config(self) -> None:
        if not self.model_id:
            raise ValueError("model is required")

    def _require_api_key(self, env_var: str) -> str:
        if not self.api_key:
            raise AuthError(
                f"{self.provider.value} backend requires an API key (set {env_var})"
            )
        return self.api_key

    @property
    def model_info(self) -> ModelInfo:
        return ModelInfo(id=self.model_id, name=self.model_id, provider=self.provider)

    def _format_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        """
        Format messages for the provider's API.
        Default implementation is the plain role/content list.
        """
        return [message.to_dict() for message in messages]


def is_rate_limit_message(message: str) -> bool:
    lowered = message.lower()
    return "rate limit" in lowered or "rate_limit" in lowered or "too many requests" in lowered


def extract_error_message(payload: Any) -> Optional[str]:
    """
    Pull an error message out of a provider error payload.

    Handles {"error": {"message": ...}} (OpenAI style) and {"error": "..."} (Ollama).
    """
    if not isinstance(payload, dict) or "error" not in payload:
        return None
    error = payload["error"]
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or error)
    if error:
        return str(error)
    return None


def classify_http_error(status_code: int, message: str) -> BackendError:
    """Map an HTTP status and provider message onto the error taxonomy"""
    if status_code in AUTH_STATUS_CODES:
        return AuthError(f"HTTP {status_code}: {message}")
    retryable = status_code == RATE_LIMIT_STATUS or is_rate_limit_message(message)
    return ProviderError(message, retryable=retryable, status_code=status_code)


class HTTPBackendAdapter(BaseBackendAdapter):
    """
    Adapter base for backends reached with a JSON POST over httpx.

    Subclasses provide _build_payload and _extract_content.
    """

    def __init__(self, settings: BackendSettings, client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings)
        if not settings.api_url:
            raise ValueError(f"{self.provider.value} backend requires an API URL")
        self.api_url = settings.api_url
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10.0, read=settings.timeout, write=30.0, pool=10.0)
        )

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _build_payload(self, messages: List[Message]) -> Dict[str, Any]:
        raise NotImplementedError("Subclass must implement _build_payload")

    def _extract_content(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError("Subclass must implement _extract_content")

    async def send(self, messages: List[Message]) -> str:
        payload = self._build_payload(messages)
        logger.debug(
            f"Sending {len(messages)} messages to {self.provider.value} "
            f"(model={self.model_id})"
        )

        try:
            response = await self.client.post(self.api_url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            raise TransportError(f"{self.provider.value} request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = extract_error_message(data) or response.text[:500] or response.reason_phrase
            raise classify_http_error(response.status_code, message)

        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.provider.value} returned a non-JSON response",
                status_code=response.status_code
            )

        # Some providers report errors with a 200 status
        message = extract_error_message(data)
        if message is not None:
            raise classify_http_error(response.status_code, message)

        return self._extract_content(data)

    async def close(self) -> None:
        await self.client.aclose()
