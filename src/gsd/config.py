"""
Engine configuration.

All environment lookups happen here, once, in EngineConfig.from_env. The
resulting struct is passed explicitly to the dispatcher, planner and backend
factory.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .utils.retry import RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_ROLES = ["planner", "architect", "backend", "frontend", "db", "reviewer"]


@dataclass
class BackendSettings:
    """Connection and generation settings for one backend"""
    name: str
    model: str
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    temperature: float = 0.4
    max_tokens: int = 2000
    timeout: float = 120.0


@dataclass
class EngineConfig:
    """Runtime settings for the agent engine"""
    backend: str = "groq"
    backends: Dict[str, BackendSettings] = field(default_factory=dict)
    retry: RetryConfig = field(default_factory=RetryConfig)
    max_iterations: int = 15
    between_iterations_delay: float = 0.0
    between_actions_delay: float = 0.0
    planner_cooldown: float = 2.0
    max_outer_iterations: int = 10
    max_delegation_depth: int = 2
    max_result_chars: int = 4000
    command_timeout: float = 300.0
    auto_mode: bool = False
    roles: List[str] = field(default_factory=lambda: list(DEFAULT_ROLES))

    @property
    def backend_settings(self) -> BackendSettings:
        """Settings of the selected backend (empty defaults if not configured)"""
        settings = self.backends.get(self.backend)
        if settings is None:
            return BackendSettings(name=self.backend, model="")
        return settings

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ
        backend = (env.get("AGENT_BACKEND") or "groq").strip().lower()
        backends = _load_backends(env)

        prefix = _ENV_PREFIXES.get(backend, backend.upper())
        retry = RetryConfig(
            max_attempts=_to_positive_int(
                env.get(f"{prefix}_RETRY_LIMIT") or env.get("MAX_RETRIES"),
                default=3,
                name=f"{prefix}_RETRY_LIMIT"
            ),
            base_delay=_to_positive_float(
                env.get(f"{prefix}_BACKOFF_SECONDS") or env.get("RETRY_BASE_DELAY"),
                default=2.0,
                name=f"{prefix}_BACKOFF_SECONDS"
            ),
            max_delay=_to_positive_float(env.get("RETRY_MAX_DELAY"), default=None, name="RETRY_MAX_DELAY"),
        )

        roles_value = env.get("AGENT_ROLES")
        roles = (
            [role.strip() for role in roles_value.split(",") if role.strip()]
            if roles_value else list(DEFAULT_ROLES)
        )

        return cls(
            backend=backend,
            backends=backends,
            retry=retry,
            max_iterations=_to_positive_int(
                env.get("AGENT_MAX_ITERATIONS"), default=15, name="AGENT_MAX_ITERATIONS"
            ),
            between_iterations_delay=_to_float(
                env.get(f"{prefix}_BETWEEN_ITER_SECONDS"), default=0.0,
                name=f"{prefix}_BETWEEN_ITER_SECONDS"
            ),
            between_actions_delay=_to_float(
                env.get(f"{prefix}_BETWEEN_ACTIONS_SECONDS"), default=0.0,
                name=f"{prefix}_BETWEEN_ACTIONS_SECONDS"
            ),
            planner_cooldown=_to_float(
                env.get("PLANNER_COOLDOWN_SECONDS"), default=2.0, name="PLANNER_COOLDOWN_SECONDS"
            ),
            max_outer_iterations=_to_positive_int(
                env.get("AGENT_MAX_OUTER_ITERATIONS"), default=10, name="AGENT_MAX_OUTER_ITERATIONS"
            ),
            max_delegation_depth=_to_non_negative_int(
                env.get("AGENT_MAX_DELEGATION_DEPTH"), default=2, name="AGENT_MAX_DELEGATION_DEPTH"
            ),
            max_result_chars=_to_positive_int(
                env.get("AGENT_MAX_RESULT_CHARS"), default=4000, name="AGENT_MAX_RESULT_CHARS"
            ),
            command_timeout=_to_float(
                env.get("AGENT_COMMAND_TIMEOUT"), default=300.0, name="AGENT_COMMAND_TIMEOUT"
            ),
            auto_mode=_to_bool(env.get("AGENT_AUTO_MODE"), default=False),
            roles=roles,
        )


# Environment variable prefix per backend name
_ENV_PREFIXES = {
    "groq": "GROQ",
    "github": "GITHUB",
    "ollama": "OLLAMA",
    "gemini": "GEMINI",
    "anthropic": "ANTHROPIC",
}


def _load_backends(env: Mapping[str, str]) -> Dict[str, BackendSettings]:
    def settings(name: str, prefix: str, model: str, api_key_var: str,
                 api_url: Optional[str], url_var: str) -> BackendSettings:
        return BackendSettings(
            name=name,
            model=env.get(f"{prefix}_MODEL") or model,
            api_key=env.get(api_key_var) or None,
            api_url=env.get(url_var) or api_url,
            temperature=_to_float(
                env.get(f"{prefix}_TEMPERATURE"), default=0.4, name=f"{prefix}_TEMPERATURE"
            ),
            max_tokens=_to_positive_int(
                env.get(f"{prefix}_MAX_TOKENS"), default=2000, name=f"{prefix}_MAX_TOKENS"
            ),
            timeout=_to_float(
                env.get(f"{prefix}_TIMEOUT"), default=120.0, name=f"{prefix}_TIMEOUT"
            ),
        )

    return {
        "groq": settings(
            "groq", "GROQ", "llama-3.3-70b-versatile", "GROQ_API_KEY",
            "https://api.groq.com/openai/v1/chat/completions", "GROQ_API_URL"
        ),
        "github": settings(
            "github", "GITHUB", "gpt-4o", "GITHUB_TOKEN",
            "https://models.inference.ai.azure.com/chat/completions", "GITHUB_MODELS_API_URL"
        ),
        "ollama": settings(
            "ollama", "OLLAMA", "llama3.2", "OLLAMA_API_KEY",
            "http://localhost:11434/api/chat", "OLLAMA_API_URL"
        ),
        "gemini": settings(
            "gemini", "GEMINI", "gemini-2.5-flash", "GEMINI_API_KEY",
            None, "GEMINI_API_URL"
        ),
        "anthropic": settings(
            "anthropic", "ANTHROPIC", "claude-3-5-sonnet-20241022", "ANTHROPIC_API_KEY",
            None, "ANTHROPIC_API_URL"
        ),
    }


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Convert common env var truthy/falsy values into booleans."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _to_float(value: Optional[str], *, default: float, name: str) -> float:
    if value is None or not str(value).strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Invalid {name} value: {value}, using default {default}")
        return default
    if parsed < 0:
        logger.warning(f"Negative {name} value: {value}, using default {default}")
        return default
    return parsed


def _to_positive_float(value: Optional[str], *, default: Optional[float], name: str) -> Optional[float]:
    parsed = _to_float(value, default=default, name=name)
    if parsed is not None and parsed <= 0:
        logger.warning(f"{name} must be positive, using default {default}")
        return default
    return parsed


def _to_positive_int(value: Optional[str], *, default: int, name: str) -> int:
    parsed = _to_non_negative_int(value, default=default, name=name)
    if parsed == 0:
        logger.warning(f"{name} must be positive, using default {default}")
        return default
    return parsed


def _to_non_negative_int(value: Optional[str], *, default: int, name: str) -> int:
    if value is None or not str(value).strip():
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        logger.warning(f"Invalid {name} value: {value}, using default {default}")
        return default
    if parsed < 0:
        logger.warning(f"Negative {name} value: {value}, using default {default}")
        return default
    return parsed
