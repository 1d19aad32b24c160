"""Common interface for the generative AI backends that produce keyword candidates."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from langchain_core.messages import AIMessage, HumanMessage
from pydantic import ValidationError as PydanticValidationError

from lib.appstore import AppProfile
from lib.errors import ConfigError, NetworkError, ProviderError
from lib.images import FetchedImage, ImageFetcher
from lib.keyword_tool import KEYWORD_TOOL_NAME, KeywordSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    model: str
    temperature: float = 0.3
    max_tokens: int = 2000


class BaseAIProvider(ABC):
    """
    Keyword generation contract shared by every AI provider.

    Subclasses wire a LangChain chat model, the provider's image block shape and
    its structured output instructions. Generation always goes through the
    `generate_app_keywords` tool with the tool choice pinned to it.
    """

    provider_name: str = ""
    display_name: str = ""

    def __init__(
        self,
        api_key: str,
        config: ProviderConfig,
        image_fetcher: Optional[ImageFetcher] = None,
        client: Any = None
    ):
        if not api_key:
            raise ConfigError(f"API key is required for {type(self).__name__}")

        self.api_key = api_key
        self.config = config
        self.image_fetcher = image_fetcher
        self._client = client

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def client(self):
        """LangChain chat model, created on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    @abstractmethod
    def _create_client(self):
        """Build the LangChain chat model for this provider."""

    @abstractmethod
    def _tool_spec(self) -> dict:
        """The keyword tool in the provider's native declaration format."""

    @abstractmethod
    def _format_image(self, image: FetchedImage) -> dict:
        """Wrap one fetched image in the provider's native attachment block."""

    @abstractmethod
    def parse_response(self, response: AIMessage) -> KeywordSet:
        """Normalize the chat model reply into a KeywordSet or raise ProviderError."""

    def format_prompt(self, profile: AppProfile) -> str:
        return f"""Analyze this app store data and generate the most relevant search keywords that users would likely use to find this app:

Title: {profile.title}

Description: {profile.description}

I'm also providing screenshots of the app store page. Using the information provided in the screenshots, and the description of the app, provide the most relevant search queries directly related to the app and the information provided in screenshots, title, subtitle and description. Ensure only keywords/search queries that would be exact search phrases derived from title, subtitle, app screenshots, and description. Exclude long tail keywords, "* app" search phrases and any search phrases a user wouldn't realistically search for.

Generate 10-15 highly relevant keywords for app store search optimization."""

    async def process_images(self, image_urls: List[str]) -> List[dict]:
        """Fetch screenshots one at a time; images that fail are logged and skipped."""
        if not image_urls:
            return []

        if self.image_fetcher is not None:
            return await self._process_with(self.image_fetcher, image_urls)

        async with ImageFetcher() as fetcher:
            return await self._process_with(fetcher, image_urls)

    async def _process_with(self, fetcher: ImageFetcher, image_urls: List[str]) -> List[dict]:
        processed = []
        for image_url in image_urls:
            try:
                image = await fetcher.fetch(image_url)
                processed.append(self._format_image(image))
            except NetworkError as e:
                logger.warning(f"Failed to process screenshot for {self.display_name}: {e}")
        return processed

    async def generate_keywords(self, profile: AppProfile) -> KeywordSet:
        logger.info(f"Using {self.display_name} ({self.model}) for keyword generation...")

        content = [{"type": "text", "text": self.format_prompt(profile)}]
        content.extend(await self.process_images(profile.screenshots))

        try:
            model = self.client.bind_tools([self._tool_spec()], tool_choice=KEYWORD_TOOL_NAME)
            response = await model.ainvoke([HumanMessage(content=content)])
        except Exception as e:
            logger.error(f"Error generating keywords with {self.display_name}: {e}")
            raise ProviderError(f"{self.display_name} error: {e}") from e

        return self.parse_response(response)

    def _keywords_from_tool_call(self, response: AIMessage) -> Optional[KeywordSet]:
        """Return the keywords of the generate_app_keywords call, or None if there is none."""
        for tool_call in getattr(response, "tool_calls", None) or []:
            if tool_call.get("name") != KEYWORD_TOOL_NAME:
                continue
            try:
                return KeywordSet.model_validate(tool_call.get("args") or {})
            except PydanticValidationError as e:
                raise ProviderError(f"{self.display_name} returned invalid keywords: {e}") from e
        return None

    def __repr__(self):
        return f"{type(self).__name__}(model='{self.model}')"


def response_text(response: AIMessage) -> str:
    """Plain text of a chat reply whose content may be a string or a list of blocks."""
    content = response.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
