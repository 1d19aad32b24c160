import logging
from typing import Dict, List, Optional

from lib.appstore import AppProfile
from lib.errors import ConfigError, ProviderError
from lib.images import ImageFetcher
from lib.provider_factory import AIProviderFactory
from service.settings import Settings

logger = logging.getLogger(__name__)


class KeywordGenerator:
    """Generates search keywords for an app through the selected AI provider."""

    def __init__(self, factory: AIProviderFactory, overrides: Optional[Dict] = None):
        self.factory = factory
        self.overrides = overrides or {}

    async def generate(self, profile: AppProfile, provider_name: Optional[str] = None) -> List[str]:
        """
        Generate keywords for one app profile.

        Raises ConfigError when the provider is unknown or has no credential and
        ProviderError for any failure of the provider itself.
        """
        selected = self.factory.resolve(provider_name)

        validation = self.factory.validate(selected)
        if not validation.success:
            raise ConfigError(validation.message)

        provider = self.factory.build(selected, self.overrides)
        logger.info(f"Using {selected.upper()} AI provider for keyword generation")

        try:
            keyword_set = await provider.generate_keywords(profile)
        except (ProviderError, ConfigError):
            raise
        except Exception as e:
            raise ProviderError(f"{selected} keyword generation failed: {e}") from e

        logger.info(f"Generated {len(keyword_set.keywords)} keywords for {profile.title}: {', '.join(keyword_set.keywords)}")
        return keyword_set.keywords


async def generate_keywords(
    profile: AppProfile,
    settings: Settings,
    provider_name: Optional[str] = None,
    overrides: Optional[Dict] = None,
    image_fetcher: Optional[ImageFetcher] = None
) -> List[str]:
    """Convenience wrapper building a one-off KeywordGenerator from settings."""
    generator = KeywordGenerator(AIProviderFactory(settings, image_fetcher=image_fetcher), overrides)
    return await generator.generate(profile, provider_name)
