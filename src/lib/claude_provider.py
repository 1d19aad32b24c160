"""Claude provider backed by langchain-anthropic."""

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import AIMessage

from lib.ai_provider import BaseAIProvider
from lib.appstore import AppProfile
from lib.errors import ProviderError
from lib.images import FetchedImage
from lib.keyword_tool import (
    KEYWORD_TOOL_DESCRIPTION,
    KEYWORD_TOOL_NAME,
    KEYWORD_TOOL_PARAMETERS,
    KeywordSet,
)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"


class ClaudeProvider(BaseAIProvider):
    provider_name = "claude"
    display_name = "Claude AI"

    def _create_client(self):
        return ChatAnthropic(
            model=self.config.model,
            api_key=self.api_key,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

    def _tool_spec(self) -> dict:
        return {
            "name": KEYWORD_TOOL_NAME,
            "description": KEYWORD_TOOL_DESCRIPTION,
            "input_schema": KEYWORD_TOOL_PARAMETERS,
        }

    def _format_image(self, image: FetchedImage) -> dict:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type.value,
                "data": image.to_base64(),
            },
        }

    def format_prompt(self, profile: AppProfile) -> str:
        return (
            super().format_prompt(profile)
            + f"\n\nUse the {KEYWORD_TOOL_NAME} function to return your response with the identified keywords."
        )

    def parse_response(self, response: AIMessage) -> KeywordSet:
        keyword_set = self._keywords_from_tool_call(response)
        if keyword_set is None:
            raise ProviderError("No valid function call found in Claude response")
        return keyword_set
