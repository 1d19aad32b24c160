"""Gemini provider backed by langchain-google-genai."""

import logging
import re

from langchain_core.messages import AIMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from lib.ai_provider import BaseAIProvider, response_text
from lib.appstore import AppProfile
from lib.errors import ProviderError
from lib.images import FetchedImage
from lib.keyword_tool import (
    KEYWORD_TOOL_DESCRIPTION,
    KEYWORD_TOOL_NAME,
    KEYWORD_TOOL_PARAMETERS,
    KeywordSet,
)

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"

_BRACKETED_LIST = re.compile(r"\[([^\]]+)\]")


class GeminiProvider(BaseAIProvider):
    provider_name = "gemini"
    display_name = "Gemini AI"

    def _create_client(self):
        return ChatGoogleGenerativeAI(
            model=self.config.model,
            google_api_key=self.api_key,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_tokens,
        )

    def _tool_spec(self) -> dict:
        # Bound with tool_choice=<name>, which maps to function calling mode ANY
        # restricted to this one function
        return {
            "type": "function",
            "function": {
                "name": KEYWORD_TOOL_NAME,
                "description": KEYWORD_TOOL_DESCRIPTION,
                "parameters": KEYWORD_TOOL_PARAMETERS,
            },
        }

    def _format_image(self, image: FetchedImage) -> dict:
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{image.media_type.value};base64,{image.to_base64()}"},
        }

    def format_prompt(self, profile: AppProfile) -> str:
        return (
            super().format_prompt(profile)
            + f"\n\nPlease use the {KEYWORD_TOOL_NAME} function to return your response with the identified keywords in a structured format."
        )

    def parse_response(self, response: AIMessage) -> KeywordSet:
        keyword_set = self._keywords_from_tool_call(response)
        if keyword_set is not None:
            return keyword_set

        # Fallback: a bracketed, comma separated list in the text reply
        match = _BRACKETED_LIST.search(response_text(response))
        if match:
            keywords = [k.strip().strip("'\"").strip() for k in match.group(1).split(",")]
            keywords = [k for k in keywords if k]
            if keywords:
                logger.warning("Gemini skipped the function call; parsed keywords from text reply")
                return KeywordSet(keywords=keywords)

        raise ProviderError(
            "Failed to parse Gemini response: no valid function call or parseable keywords found"
        )
