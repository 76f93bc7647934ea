"""Configuration management for codepilot"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.error_handler import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # LLM
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4-turbo"
    llm_timeout_seconds: float = 60.0

    # Aggregation service, only consumed by the terminal UI
    composio_api_key: str | None = None
    composio_base_url: str = "https://backend.composio.dev/unify"

    # MCP provider endpoints
    supabase_mcp_url: str = "http://127.0.0.1:8001/sse"
    linear_mcp_url: str = "http://127.0.0.1:8002/sse"
    github_mcp_url: str = "http://127.0.0.1:8003/sse"
    # Unset means the HTTP client's own default applies
    mcp_request_timeout: float | None = None

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8010

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def has_openai_key(self) -> bool:
        """Check if an OpenAI API key is configured"""
        return bool(self.openai_api_key and self.openai_api_key.strip())

    def get_mcp_url(self, provider: str) -> str:
        """Endpoint URL for a provider; unknown names fall back to Supabase."""
        urls = {
            "supabase": self.supabase_mcp_url,
            "linear": self.linear_mcp_url,
            "github": self.github_mcp_url,
        }
        return urls.get(str(getattr(provider, "value", provider)).lower(), self.supabase_mcp_url)

    def validate_credentials(self) -> None:
        """Raise ConfigurationError when a required credential is missing."""
        if not self.has_openai_key:
            raise ConfigurationError(
                "OPENAI_API_KEY must be set", details={"variable": "OPENAI_API_KEY"}
            )


# Global settings instance
settings = Settings()


def get_config() -> Settings:
    """Get the global configuration instance."""
    return settings
