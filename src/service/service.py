"""FastAPI front door for the ASO Keyword Analyzer."""

import logging
from datetime import datetime
from typing import AsyncGenerator, List

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent.graph import run_app_analysis
from lib.aso_service_client import ASOServiceClient
from lib.errors import ASOAnalyzerError, ConfigError, NotFoundError, ProviderError, ValidationError
from lib.keyword_scoring import ASOAnalyzer
from lib.provider_factory import AIProviderFactory
from schema.schema import (
    AnalysisOut,
    AnalyzeAppInput,
    AnalyzeKeywordsInput,
    ConfigOut,
    ErrorOut,
    HealthOut,
    KeywordScoreOut,
    ProvidersOut,
)
from service.settings import Settings, settings

# Set up logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"
MAX_KEYWORDS_PER_REQUEST = 20


def get_settings() -> Settings:
    return settings


async def get_keyword_analyzer(
    current_settings: Settings = Depends(get_settings)
) -> AsyncGenerator[ASOAnalyzer, None]:
    """Per-request scoring engine with its own lookup session."""
    async with ASOServiceClient(
        current_settings.ASO_SERVICE_URL,
        timeout=current_settings.REQUEST_TIMEOUT_SECONDS
    ) as lookup:
        yield ASOAnalyzer(
            lookup,
            platform=current_settings.ASO_PLATFORM,
            delay_seconds=current_settings.SCORING_DELAY_SECONDS
        )


app = FastAPI(
    title="ASO Keyword Analyzer",
    description="Keyword research and ASO scoring for App Store apps",
    version=VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(error=error, message=message).model_dump())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, "Invalid request", str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, "App not found", "The specified app ID was not found in the App Store")


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    logger.error(f"Configuration error: {exc}")
    return _error(500, "Configuration error", str(exc))


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.error(f"AI provider error: {exc}")
    return _error(502, "AI provider error", str(exc))


@app.exception_handler(ASOAnalyzerError)
async def analysis_error_handler(request: Request, exc: ASOAnalyzerError):
    logger.error(f"Analysis failed: {exc}")
    return _error(500, "Analysis failed", str(exc) or "An unexpected error occurred during analysis")


@app.get("/api/health")
async def health_check() -> HealthOut:
    """Health check endpoint."""
    return HealthOut(status="healthy", timestamp=datetime.now().isoformat(), version=VERSION)


@app.get("/api/providers")
async def list_providers(current_settings: Settings = Depends(get_settings)) -> ProvidersOut:
    """Available AI providers and whether their credentials are configured."""
    factory = AIProviderFactory(current_settings)
    return ProvidersOut(
        providers=factory.describe_providers(),
        configuration=factory.environment_config(),
        timestamp=datetime.now().isoformat()
    )


@app.get("/api/config")
async def get_config(current_settings: Settings = Depends(get_settings)) -> ConfigOut:
    """Current configuration with credentials masked."""
    return ConfigOut(
        configuration=AIProviderFactory(current_settings).environment_config(),
        timestamp=datetime.now().isoformat()
    )


@app.post("/api/analyze-app")
async def analyze_app_endpoint(
    analyze_input: AnalyzeAppInput,
    current_settings: Settings = Depends(get_settings)
) -> AnalysisOut:
    """Fetch the app, generate keywords for it and its similar apps, and score a sample."""
    if analyze_input.app_id is None or str(analyze_input.app_id).strip() == "":
        raise ValidationError("appId is required")

    logger.info(
        f"Starting app analysis for ID: {analyze_input.app_id} "
        f"with provider: {analyze_input.ai_provider or 'environment default'}"
    )
    result = await run_app_analysis(analyze_input.app_id, analyze_input.ai_provider, current_settings)
    logger.info(f"App analysis completed for ID: {analyze_input.app_id}")

    return AnalysisOut.from_result(result)


@app.post("/api/analyze-keywords")
async def analyze_keywords_endpoint(
    analyze_input: AnalyzeKeywordsInput,
    analyzer: ASOAnalyzer = Depends(get_keyword_analyzer)
) -> List[KeywordScoreOut]:
    """Score a list of keywords directly, bypassing generation."""
    keywords = [keyword.strip() for keyword in analyze_input.keywords if keyword and keyword.strip()]
    if not keywords:
        raise ValidationError("At least one valid keyword is required")
    if len(keywords) > MAX_KEYWORDS_PER_REQUEST:
        raise ValidationError(f"Maximum {MAX_KEYWORDS_PER_REQUEST} keywords allowed per request")

    logger.info(f"Starting keyword analysis for {len(keywords)} keywords")
    scores = await analyzer.analyze_keywords(keywords)

    return [KeywordScoreOut.from_score(score) for score in scores]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "service.service:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True
    )
