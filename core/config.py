# =============================================================================
# core/config.py  —  Environment configuration
# =============================================================================
#
# Two groups of settings, each loaded from the environment (entry points call
# load_dotenv() first so a .env file works too):
#
#   ServerSettings  → the MCP tool server: Asana credentials, request
#                     ceiling, transport/port, log level
#   AgentSettings   → the console agent: which LLM provider/model to hand to
#                     LiteLlm, and that provider's API key
#
# Missing or malformed values raise ConfigError.  Entry points treat that as
# fatal and exit before serving anything.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.asana_client import DEFAULT_TIMEOUT
from core.rate_limiter import DEFAULT_MAX_REQUESTS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
TRANSPORTS = ("stdio", "http")

# provider → (API key variables, model override variable, default model, LiteLlm prefix)
PROVIDERS: dict[str, tuple[tuple[str, ...], str, str, str]] = {
    "anthropic": (("ANTHROPIC_API_KEY",), "ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022", "anthropic"),
    "openai": (("OPENAI_API_KEY",), "OPENAI_MODEL", "gpt-4o", "openai"),
    "google": (("GEMINI_API_KEY", "GOOGLE_API_KEY"), "GOOGLE_MODEL", "gemini-1.5-pro-latest", "gemini"),
    "openrouter": (("OPENROUTER_API_KEY",), "OPENROUTER_MODEL", "openai/gpt-4o", "openrouter"),
}


class ConfigError(Exception):
    """Required configuration is missing or invalid."""


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ConfigError(f"{name} is required (set it in the environment or .env file)")
    return value


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be > 0, got {value}")
    return value


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be > 0, got {value}")
    return value


def _choice(env: Mapping[str, str], name: str, choices: tuple[str, ...], default: str,
            upper: bool = False) -> str:
    raw = env.get(name, "").strip() or default
    value = raw.upper() if upper else raw.lower()
    if value not in choices:
        raise ConfigError(f"Invalid {name}: {raw!r}. Use one of: {', '.join(choices)}")
    return value


@dataclass
class ServerSettings:
    asana_access_token: str
    asana_workspace_gid: str
    rate_limit_per_minute: int = DEFAULT_MAX_REQUESTS
    request_timeout: float = DEFAULT_TIMEOUT
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 3141
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"ServerSettings(workspace={self.asana_workspace_gid!r}, "
            f"rate_limit={self.rate_limit_per_minute}/min, transport={self.transport!r}, "
            f"port={self.port}, log_level={self.log_level!r})"
        )


@dataclass
class AgentSettings:
    provider: str
    model: str
    log_level: str = "INFO"

    @property
    def litellm_model(self) -> str:
        """Model string in LiteLlm's "<provider>/<model>" form."""
        return f"{PROVIDERS[self.provider][3]}/{self.model}"


def load_server_settings(environ: Optional[Mapping[str, str]] = None) -> ServerSettings:
    env = os.environ if environ is None else environ
    return ServerSettings(
        asana_access_token=_required(env, "ASANA_ACCESS_TOKEN"),
        asana_workspace_gid=_required(env, "ASANA_WORKSPACE_GID"),
        rate_limit_per_minute=_positive_int(env, "ASANA_RATE_LIMIT", DEFAULT_MAX_REQUESTS),
        request_timeout=_positive_float(env, "ASANA_TIMEOUT", DEFAULT_TIMEOUT),
        transport=_choice(env, "MCP_TRANSPORT", TRANSPORTS, "stdio"),
        host=env.get("HOST", "").strip() or "127.0.0.1",
        port=_positive_int(env, "PORT", 3141),
        log_level=_choice(env, "LOG_LEVEL", LOG_LEVELS, "INFO", upper=True),
    )


def load_agent_settings(environ: Optional[Mapping[str, str]] = None) -> AgentSettings:
    env = os.environ if environ is None else environ
    provider = _choice(env, "LLM_PROVIDER", tuple(PROVIDERS), "anthropic")
    key_vars, model_var, default_model, _ = PROVIDERS[provider]

    if not any(env.get(var, "").strip() for var in key_vars):
        raise ConfigError(
            f"{' or '.join(key_vars)} is required when using the {provider} provider"
        )

    return AgentSettings(
        provider=provider,
        model=env.get(model_var, "").strip() or default_model,
        log_level=_choice(env, "LOG_LEVEL", LOG_LEVELS, "INFO", upper=True),
    )
