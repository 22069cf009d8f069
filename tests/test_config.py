"""Tests for environment-driven settings."""

import pytest

from core.config import ConfigError, load_agent_settings, load_server_settings

ASANA_ENV = {"ASANA_ACCESS_TOKEN": "pat-123", "ASANA_WORKSPACE_GID": "ws-1"}


class TestServerSettings:

    def test_defaults(self):
        settings = load_server_settings(ASANA_ENV)

        assert settings.asana_access_token == "pat-123"
        assert settings.asana_workspace_gid == "ws-1"
        assert settings.rate_limit_per_minute == 100
        assert settings.request_timeout == 30.0
        assert settings.transport == "stdio"
        assert settings.port == 3141
        assert settings.log_level == "INFO"

    def test_overrides(self):
        settings = load_server_settings({
            **ASANA_ENV,
            "ASANA_RATE_LIMIT": "20",
            "MCP_TRANSPORT": "HTTP",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        })

        assert settings.rate_limit_per_minute == 20
        assert settings.transport == "http"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("missing", ["ASANA_ACCESS_TOKEN", "ASANA_WORKSPACE_GID"])
    def test_missing_credentials_are_fatal(self, missing):
        env = {k: v for k, v in ASANA_ENV.items() if k != missing}

        with pytest.raises(ConfigError, match=missing):
            load_server_settings(env)

    @pytest.mark.parametrize("name, value", [
        ("ASANA_RATE_LIMIT", "lots"),
        ("ASANA_RATE_LIMIT", "0"),
        ("PORT", "-1"),
        ("MCP_TRANSPORT", "carrier-pigeon"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values_name_the_variable(self, name, value):
        with pytest.raises(ConfigError, match=name):
            load_server_settings({**ASANA_ENV, name: value})

    def test_repr_hides_the_token(self):
        assert "pat-123" not in repr(load_server_settings(ASANA_ENV))


class TestAgentSettings:

    def test_defaults_to_anthropic(self):
        settings = load_agent_settings({"ANTHROPIC_API_KEY": "sk-ant"})

        assert settings.provider == "anthropic"
        assert settings.litellm_model == "anthropic/claude-3-5-sonnet-20241022"

    def test_model_override(self):
        settings = load_agent_settings({
            "LLM_PROVIDER": "openai",
            "OPENAI_API_KEY": "sk-oa",
            "OPENAI_MODEL": "gpt-4o-mini",
        })

        assert settings.litellm_model == "openai/gpt-4o-mini"

    @pytest.mark.parametrize("key", ["GEMINI_API_KEY", "GOOGLE_API_KEY"])
    def test_google_accepts_either_key(self, key):
        settings = load_agent_settings({"LLM_PROVIDER": "google", key: "g-key"})

        assert settings.litellm_model == "gemini/gemini-1.5-pro-latest"

    def test_openrouter_model_keeps_vendor_prefix(self):
        settings = load_agent_settings({"LLM_PROVIDER": "openrouter", "OPENROUTER_API_KEY": "or"})

        assert settings.litellm_model == "openrouter/openai/gpt-4o"

    def test_missing_provider_key_is_fatal(self):
        with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
            load_agent_settings({"LLM_PROVIDER": "openai", "ANTHROPIC_API_KEY": "sk-ant"})

    def test_unknown_provider(self):
        with pytest.raises(ConfigError, match="LLM_PROVIDER"):
            load_agent_settings({"LLM_PROVIDER": "mystery"})
