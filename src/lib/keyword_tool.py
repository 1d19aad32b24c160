"""Function tool definition for keyword generation."""

from typing import List

from pydantic import BaseModel, Field

KEYWORD_TOOL_NAME = "generate_app_keywords"

KEYWORD_TOOL_DESCRIPTION = (
    "Generates relevant search keywords for app store optimization based on app data and screenshots"
)

KEYWORD_TOOL_PARAMETERS = {
    "type": "object",
    "properties": {
        "keywords": {
            "type": "array",
            "items": {
                "type": "string",
                "description": "A relevant search keyword that users would likely use to find this app"
            },
            "description": "Array of 10-15 highly relevant keywords for app store search optimization"
        }
    },
    "required": ["keywords"]
}


class KeywordSet(BaseModel):
    """Keywords returned by any AI provider"""
    keywords: List[str] = Field(
        min_length=1,
        description="Keywords in the order the provider returned them"
    )
