"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    anthropic_api_key: str | None = Field(
        default=None, validation_alias="ANTHROPIC_API_KEY"
    )
    v2ex_token: str | None = Field(default=None, validation_alias="V2EX_TOKEN")

    def ai_key_for_provider(self, provider: str) -> str | None:
        """Return the API key for a summarisation provider.

        The provider's own variable wins; the other one is the fallback.
        """
        if provider == "anthropic":
            return self.anthropic_api_key or self.openai_api_key
        return self.openai_api_key or self.anthropic_api_key


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
