"""Selection and construction of AI provider instances."""

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, Optional

from lib.ai_provider import BaseAIProvider, ProviderConfig
from lib.claude_provider import DEFAULT_CLAUDE_MODEL, ClaudeProvider
from lib.errors import ConfigError
from lib.gemini_provider import DEFAULT_GEMINI_MODEL, GeminiProvider
from lib.images import ImageFetcher
from service.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 2000

PROVIDERS = {
    "gemini": GeminiProvider,
    "claude": ClaudeProvider,
}

DEFAULT_MODELS = {
    "gemini": DEFAULT_GEMINI_MODEL,
    "claude": DEFAULT_CLAUDE_MODEL,
}

PROVIDER_INFO = {
    "gemini": {"name": "Gemini 2.5 Pro", "description": "Cost-effective, fast analysis"},
    "claude": {"name": "Claude Sonnet 4", "description": "Premium quality analysis"},
}

CREDENTIAL_NAMES = {
    "gemini": "GEMINI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}


@dataclass
class ProviderValidation:
    success: bool
    message: str


class AIProviderFactory:
    """Resolves, validates and builds AI providers from explicit settings."""

    def __init__(self, settings: Settings, image_fetcher: Optional[ImageFetcher] = None):
        self.settings = settings
        self.image_fetcher = image_fetcher

    @staticmethod
    def available_providers() -> List[str]:
        return list(PROVIDERS)

    @staticmethod
    def is_valid_provider(provider_name: Optional[str]) -> bool:
        return bool(provider_name) and provider_name.strip().lower() in PROVIDERS

    def resolve(self, provider_name: Optional[str] = None) -> str:
        """
        Pick the provider id: explicit argument, then AI_PROVIDER, then the default.

        Raises ConfigError for an unknown id.
        """
        for candidate in (provider_name, self.settings.AI_PROVIDER):
            if candidate and candidate.strip():
                provider = candidate.strip().lower()
                if provider not in PROVIDERS:
                    raise ConfigError(
                        f"Unsupported AI provider: {candidate}. Supported providers: {', '.join(PROVIDERS)}"
                    )
                return provider
        return DEFAULT_PROVIDER

    def validate(self, provider_name: str) -> ProviderValidation:
        """Check that the provider is known and its credential is present. Never raises."""
        provider = (provider_name or "").strip().lower()
        if provider not in PROVIDERS:
            return ProviderValidation(False, f"Unsupported provider: {provider_name}")

        if not self.settings.api_key_for(provider):
            return ProviderValidation(
                False,
                f"{CREDENTIAL_NAMES[provider]} environment variable is required for {provider.title()} provider"
            )

        return ProviderValidation(True, f"{provider} provider configuration is valid")

    def build_config(self, provider_name: str, overrides: Optional[Dict] = None) -> ProviderConfig:
        """Merge built-in defaults < settings < overrides into a ProviderConfig."""
        provider = provider_name.strip().lower()
        if provider not in PROVIDERS:
            raise ConfigError(f"Unsupported AI provider: {provider_name}")

        values = {
            "model": DEFAULT_MODELS[provider],
            "temperature": DEFAULT_TEMPERATURE,
            "max_tokens": DEFAULT_MAX_TOKENS,
        }

        env_values = {
            "model": self.settings.model_override_for(provider),
            "temperature": self.settings.AI_TEMPERATURE,
            "max_tokens": self.settings.AI_MAX_TOKENS,
        }
        values.update({key: value for key, value in env_values.items() if value is not None})

        overrides = overrides or {}
        known = {f.name for f in fields(ProviderConfig)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown provider configuration keys: {', '.join(sorted(unknown))}")
        values.update({key: value for key, value in overrides.items() if value is not None})

        config = ProviderConfig(**values)
        self._warn_on_soft_bounds(config, provider)
        return config

    def build(self, provider_name: str, overrides: Optional[Dict] = None) -> BaseAIProvider:
        provider = (provider_name or "").strip().lower()
        if provider not in PROVIDERS:
            raise ConfigError(f"Unsupported AI provider: {provider_name}")

        api_key = self.settings.api_key_for(provider)
        if not api_key:
            raise ConfigError(
                f"{CREDENTIAL_NAMES[provider]} environment variable is required for {provider.title()} provider"
            )

        config = self.build_config(provider, overrides)
        logger.info(
            f"{provider.title()} configuration: model={config.model}, "
            f"temperature={config.temperature}, max_tokens={config.max_tokens}"
        )

        return PROVIDERS[provider](api_key, config, image_fetcher=self.image_fetcher)

    @staticmethod
    def _warn_on_soft_bounds(config: ProviderConfig, provider: str) -> None:
        if not 0 <= config.temperature <= 2:
            logger.warning(
                f"{provider.title()} temperature {config.temperature} is outside recommended range (0-2). Using anyway."
            )
        if not 1 <= config.max_tokens <= 100000:
            logger.warning(
                f"{provider.title()} max_tokens {config.max_tokens} is outside recommended range (1-100000). Using anyway."
            )
        if provider not in config.model.lower():
            logger.warning(f"Model name \"{config.model}\" doesn't appear to be a {provider.title()} model.")

    def describe_providers(self) -> List[dict]:
        """Provider list with availability, as exposed by the HTTP front door."""
        return [
            {
                "id": provider,
                "name": PROVIDER_INFO[provider]["name"],
                "description": PROVIDER_INFO[provider]["description"],
                "available": self.validate(provider).success,
                "default": provider == DEFAULT_PROVIDER,
            }
            for provider in PROVIDERS
        ]

    def environment_config(self) -> Dict[str, str]:
        """Configuration summary with credentials masked."""
        s = self.settings
        return {
            "AI_PROVIDER": s.AI_PROVIDER or "not set",
            "AI_MODEL_GEMINI": s.AI_MODEL_GEMINI or f"not set (default: {DEFAULT_GEMINI_MODEL})",
            "AI_MODEL_CLAUDE": s.AI_MODEL_CLAUDE or f"not set (default: {DEFAULT_CLAUDE_MODEL})",
            "AI_TEMPERATURE": str(s.AI_TEMPERATURE) if s.AI_TEMPERATURE is not None else f"not set (default: {DEFAULT_TEMPERATURE})",
            "AI_MAX_TOKENS": str(s.AI_MAX_TOKENS) if s.AI_MAX_TOKENS is not None else f"not set (default: {DEFAULT_MAX_TOKENS})",
            "GEMINI_API_KEY": "set" if s.api_key_for("gemini") else "not set",
            "ANTHROPIC_API_KEY": "set" if s.api_key_for("claude") else "not set",
        }
