"""Application settings for the ASO Keyword Analyzer."""

import logging
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore"
    )

    # Service configuration
    HOST: str = Field(default="0.0.0.0", description="Service host")
    PORT: int = Field(default=8080, description="Service port")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")

    # AI provider configuration
    AI_PROVIDER: Optional[str] = Field(default=None, description="Default AI provider (gemini, claude)")
    GEMINI_API_KEY: Optional[SecretStr] = Field(default=None, description="Google Gemini API key")
    ANTHROPIC_API_KEY: Optional[SecretStr] = Field(default=None, description="Anthropic API key")
    AI_MODEL_GEMINI: Optional[str] = Field(default=None, description="Gemini model override")
    AI_MODEL_CLAUDE: Optional[str] = Field(default=None, description="Claude model override")
    AI_TEMPERATURE: Optional[float] = Field(default=None, description="Shared temperature override")
    AI_MAX_TOKENS: Optional[int] = Field(default=None, description="Shared max output tokens override")

    # Keyword scoring configuration
    ASO_SERVICE_URL: str = Field(default="http://localhost:8001", description="Keyword metrics service URL")
    ASO_PLATFORM: str = Field(default="itunes", description="Platform passed to keyword lookups")
    SCORING_DELAY_SECONDS: float = Field(default=0.5, description="Pause between keyword lookups")

    # Store catalog configuration
    APP_STORE_COUNTRY: str = Field(default="us", description="Two-letter App Store country code")
    REQUEST_TIMEOUT_SECONDS: float = Field(default=30, description="Total timeout for outgoing HTTP calls")

    @field_validator("AI_TEMPERATURE", "AI_MAX_TOKENS", mode="before")
    @classmethod
    def _parse_numeric_override(cls, value, info):
        """Treat blank or unparseable numeric overrides as unset."""
        if value is None or not isinstance(value, str):
            return value
        value = value.strip()
        if not value:
            return None
        try:
            return float(value) if info.field_name == "AI_TEMPERATURE" else int(value)
        except ValueError:
            logger.warning(f"Ignoring unparseable {info.field_name} value {value!r}")
            return None

    def api_key_for(self, provider: str) -> Optional[str]:
        """Return the raw credential for a provider id, or None when it is not configured."""
        secret = {
            "gemini": self.GEMINI_API_KEY,
            "claude": self.ANTHROPIC_API_KEY,
        }.get(provider)
        if secret is None:
            return None
        return secret.get_secret_value() or None

    def model_override_for(self, provider: str) -> Optional[str]:
        return {
            "gemini": self.AI_MODEL_GEMINI,
            "claude": self.AI_MODEL_CLAUDE,
        }.get(provider)


# Global settings instance, used by the entry points only
settings = Settings()
