"""Tests for environment-driven configuration"""

import pytest

from codepilot.config import Settings, get_config, settings as global_settings
from codepilot.models.routing import Provider
from codepilot.services.error_handler import ConfigurationError

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "LLM_TIMEOUT_SECONDS",
    "LINEAR_MCP_URL",
    "GITHUB_MCP_URL",
    "SUPABASE_MCP_URL",
    "MCP_REQUEST_TIMEOUT",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        config = Settings(_env_file=None)

        assert config.openai_api_key is None
        assert config.openai_model == "gpt-4-turbo"
        assert config.llm_timeout_seconds == 60.0
        assert config.supabase_mcp_url == "http://127.0.0.1:8001/sse"
        assert config.linear_mcp_url == "http://127.0.0.1:8002/sse"
        assert config.github_mcp_url == "http://127.0.0.1:8003/sse"
        assert config.mcp_request_timeout is None
        assert config.port == 8010

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "sk-env")
        clean_env.setenv("LINEAR_MCP_URL", "http://linear.internal/sse")
        clean_env.setenv("LLM_TIMEOUT_SECONDS", "12.5")

        config = Settings(_env_file=None)

        assert config.openai_api_key == "sk-env"
        assert config.linear_mcp_url == "http://linear.internal/sse"
        assert config.llm_timeout_seconds == 12.5

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=sk-from-file\nGITHUB_MCP_URL=http://gh.test/sse\n")

        config = Settings(_env_file=str(env_file))

        assert config.openai_api_key == "sk-from-file"
        assert config.get_mcp_url(Provider.GITHUB) == "http://gh.test/sse"

    def test_get_mcp_url(self, settings):
        assert settings.get_mcp_url("linear") == settings.linear_mcp_url
        assert settings.get_mcp_url(Provider.GITHUB) == settings.github_mcp_url
        assert settings.get_mcp_url("SUPABASE") == settings.supabase_mcp_url

    def test_unknown_provider_falls_back_to_supabase(self, settings):
        assert settings.get_mcp_url("jira") == settings.supabase_mcp_url

    def test_validate_credentials(self, settings):
        settings.validate_credentials()

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_missing_key_rejected(self, clean_env, key):
        config = Settings(_env_file=None, openai_api_key=key)

        assert not config.has_openai_key
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_credentials()
        assert exc_info.value.error_code == "CONFIG_ERROR"
        assert "OPENAI_API_KEY" in str(exc_info.value)

    def test_get_config_returns_global(self):
        assert get_config() is global_settings
