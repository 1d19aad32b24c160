"""Schema definitions for the ASO Keyword Analyzer service."""

from dataclasses import asdict
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model rendering camelCase JSON keys while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeAppInput(CamelModel):
    """Input for a full app analysis."""

    app_id: Optional[Union[int, str]] = Field(
        default=None,
        description="Numeric App Store track ID.",
        examples=["310633997"]
    )
    ai_provider: Optional[str] = Field(
        default=None,
        description="AI provider to use (gemini, claude). Falls back to AI_PROVIDER, then gemini.",
        examples=["gemini"]
    )


class AnalyzeKeywordsInput(CamelModel):
    """Input for direct keyword scoring."""

    keywords: List[str] = Field(
        description="Keywords to score, at most 20.",
        examples=[["chat", "messaging", "video call"]]
    )


class AppProfileOut(CamelModel):
    title: str
    description: str
    genres: List[str] = Field(default_factory=list)
    screenshots: List[str] = Field(default_factory=list)
    app_id: Optional[str] = None


class KeywordScoreOut(CamelModel):
    keyword: str
    platform: str
    traffic_score: int = Field(description="Search traffic, 0-100")
    difficulty_score: int = Field(description="Ranking difficulty, 0-100")
    competition_level: str
    traffic_level: str
    recommendation: str
    error: Optional[str] = None

    @classmethod
    def from_score(cls, score) -> "KeywordScoreOut":
        data = asdict(score)
        for key in ("competition_level", "traffic_level", "recommendation"):
            data[key] = getattr(data[key], "value", data[key])
        return cls(**data)


class AnalysisOut(CamelModel):
    """Full app analysis result."""

    app_data: AppProfileOut
    similar_apps: List[AppProfileOut] = Field(default_factory=list)
    main_app_keywords: List[str] = Field(default_factory=list)
    similar_app_keywords: List[str] = Field(default_factory=list)
    all_keywords: List[str] = Field(default_factory=list)
    keyword_analysis: List[KeywordScoreOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result) -> "AnalysisOut":
        return cls(
            app_data=AppProfileOut(**asdict(result.app_data)),
            similar_apps=[AppProfileOut(**asdict(app)) for app in result.similar_apps],
            main_app_keywords=result.main_app_keywords,
            similar_app_keywords=result.similar_app_keywords,
            all_keywords=result.all_keywords,
            keyword_analysis=[KeywordScoreOut.from_score(score) for score in result.keyword_analysis],
        )


class ProviderInfo(BaseModel):
    id: str
    name: str
    description: str
    available: bool
    default: bool


class ProvidersOut(BaseModel):
    providers: List[ProviderInfo]
    configuration: Dict[str, str]
    timestamp: str


class ConfigOut(BaseModel):
    configuration: Dict[str, str]
    timestamp: str
    note: str = "Sensitive values like API keys are masked for security"


class HealthOut(BaseModel):
    status: str
    timestamp: str
    version: str


class ErrorOut(BaseModel):
    error: str
    message: str
