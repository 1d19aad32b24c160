from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph

from lib.appstore import AppProfile, AppStoreScraper
from lib.aso_service_client import ASOServiceClient
from lib.errors import NetworkError, NotFoundError, ProviderError, ValidationError
from lib.images import ImageFetcher
from lib.keyword_scoring import ASOAnalyzer, KeywordScore
from lib.keywords import KeywordGenerator
from lib.provider_factory import AIProviderFactory
from lib.results import collect_outcomes, partition_outcomes
from service.settings import Settings

logger = logging.getLogger(__name__)

MAX_SIMILAR_APPS = 3
SAMPLE_SIZE = 5


@dataclass
class AnalysisContext:
    """Collaborators for one analysis request."""
    catalog: AppStoreScraper
    generator: KeywordGenerator
    analyzer: ASOAnalyzer
    rng: Optional[random.Random] = None
    sample_size: int = SAMPLE_SIZE
    max_similar_apps: int = MAX_SIMILAR_APPS


@dataclass
class AnalysisResult:
    app_data: AppProfile
    similar_apps: List[AppProfile] = field(default_factory=list)
    main_app_keywords: List[str] = field(default_factory=list)
    similar_app_keywords: List[str] = field(default_factory=list)
    all_keywords: List[str] = field(default_factory=list)
    keyword_analysis: List[KeywordScore] = field(default_factory=list)


class State(TypedDict, total=False):
    app_id: int
    provider: Optional[str]
    app_data: AppProfile
    similar_apps: List[AppProfile]
    main_app_keywords: List[str]
    similar_app_keywords: List[str]
    all_keywords: List[str]
    keyword_analysis: List[KeywordScore]
    result: AnalysisResult


def validate_app_id(app_id) -> int:
    """Accept a positive integer or a string of digits; anything else is a ValidationError."""
    if isinstance(app_id, bool):
        raise ValidationError("App ID must be a valid numeric value")
    if isinstance(app_id, int):
        numeric = app_id
    elif isinstance(app_id, str) and app_id.strip().isascii() and app_id.strip().isdigit():
        # ASCII only: isdigit() also accepts characters like "²" that int() rejects
        numeric = int(app_id.strip())
    else:
        raise ValidationError("App ID must be a valid numeric value")

    if numeric <= 0:
        raise ValidationError("App ID must be a positive number")
    return numeric


def sample_keywords(keywords: List[str], k: int = SAMPLE_SIZE, rng: Optional[random.Random] = None) -> List[str]:
    """Pick min(k, len(keywords)) positions uniformly at random without replacement."""
    rng = rng or random.Random()
    return rng.sample(keywords, min(k, len(keywords)))


def _context(config: RunnableConfig) -> AnalysisContext:
    context = (config.get("configurable") or {}).get("analysis_context")
    if context is None:
        raise RuntimeError("Analysis graph invoked without an analysis_context in its configurable")
    return context


async def fetch_app_data(state: dict, config: RunnableConfig) -> dict:
    """
    LangGraph node to fetch the target app and up to three similar apps.

    The target app must be fetched; similar apps that fail are skipped with a warning.
    """
    context = _context(config)
    app_id = validate_app_id(state.get("app_id"))

    logger.info(f"Starting analysis for app ID: {app_id}")
    app_data = await context.catalog.fetch_app(app_id)

    try:
        similar = await context.catalog.fetch_similar(app_id, title=app_data.title)
    except (NetworkError, NotFoundError) as e:
        logger.warning(f"Failed to fetch similar apps for {app_id}: {e}")
        similar = []

    top_similar = similar[:context.max_similar_apps]
    outcomes = await collect_outcomes(
        top_similar,
        lambda app: context.catalog.fetch_app(app.app_id),
        expected=(NetworkError, NotFoundError)
    )
    fetched, failed = partition_outcomes(outcomes)
    for outcome in failed:
        logger.warning(f"Failed to scrape data for similar app {outcome.item.app_id}: {outcome.error}")

    similar_apps = [outcome.value for outcome in fetched]
    logger.info(f"Scraped app data for {app_data.title} and {len(similar_apps)} similar apps")

    return {"app_id": app_id, "app_data": app_data, "similar_apps": similar_apps}


async def generate_app_keywords(state: dict, config: RunnableConfig) -> dict:
    """
    LangGraph node to generate keywords for the target app and its similar apps.

    Generation for the target app must succeed; similar apps that fail are skipped.
    """
    context = _context(config)
    provider = state.get("provider")
    app_data = state["app_data"]

    logger.info("Generating keywords for main app...")
    main_app_keywords = await context.generator.generate(app_data, provider)

    logger.info("Generating keywords for similar apps...")
    outcomes = await collect_outcomes(
        state.get("similar_apps", []),
        lambda app: context.generator.generate(app, provider),
        expected=(ProviderError,)
    )
    generated, failed = partition_outcomes(outcomes)
    for outcome in failed:
        logger.warning(f"Failed to generate keywords for {outcome.item.title}: {outcome.error}")

    similar_app_keywords = [keyword for outcome in generated for keyword in outcome.value]

    return {
        "main_app_keywords": main_app_keywords,
        "similar_app_keywords": similar_app_keywords,
        "all_keywords": main_app_keywords + similar_app_keywords,
    }


async def analyze_sampled_keywords(state: dict, config: RunnableConfig) -> dict:
    """LangGraph node to score a random sample of the generated keywords."""
    context = _context(config)
    sampled = sample_keywords(state.get("all_keywords", []), context.sample_size, context.rng)

    logger.info(f"Analyzing {len(sampled)} random keywords with ASO...")
    keyword_analysis = await context.analyzer.analyze_keywords(sampled)

    for score in keyword_analysis:
        logger.info(f"- {score.keyword} | traffic: {score.traffic_score} | difficulty: {score.difficulty_score}")

    return {"keyword_analysis": keyword_analysis}


def assemble_result(state: dict) -> dict:
    result = AnalysisResult(
        app_data=state["app_data"],
        similar_apps=state.get("similar_apps", []),
        main_app_keywords=state.get("main_app_keywords", []),
        similar_app_keywords=state.get("similar_app_keywords", []),
        all_keywords=state.get("all_keywords", []),
        keyword_analysis=state.get("keyword_analysis", []),
    )
    return {"result": result}


graph = (
    StateGraph(State)
    .add_node("fetch_app_data", fetch_app_data)
    .add_node("generate_app_keywords", generate_app_keywords)
    .add_node("analyze_sampled_keywords", analyze_sampled_keywords)
    .add_node("assemble_result", assemble_result)
    .add_edge("__start__", "fetch_app_data")
    .add_edge("fetch_app_data", "generate_app_keywords")
    .add_edge("generate_app_keywords", "analyze_sampled_keywords")
    .add_edge("analyze_sampled_keywords", "assemble_result")
    .add_edge("assemble_result", "__end__")
    .compile(name="ASO Keyword Analyzer")
)


async def analyze_app(app_id, provider: Optional[str] = None, *, context: AnalysisContext) -> AnalysisResult:
    """Run the full fetch, generate, sample and score pipeline for one app."""
    numeric_app_id = validate_app_id(app_id)

    final_state = await graph.ainvoke(
        {"app_id": numeric_app_id, "provider": provider},
        {"configurable": {"analysis_context": context}}
    )
    return final_state["result"]


async def run_app_analysis(app_id, provider: Optional[str], settings: Settings) -> AnalysisResult:
    """Build the default network collaborators from settings and run one analysis."""
    numeric_app_id = validate_app_id(app_id)
    timeout = settings.REQUEST_TIMEOUT_SECONDS

    async with AppStoreScraper(country=settings.APP_STORE_COUNTRY, timeout=timeout) as catalog, \
            ImageFetcher(timeout=timeout) as image_fetcher, \
            ASOServiceClient(settings.ASO_SERVICE_URL, timeout=timeout) as lookup:
        context = AnalysisContext(
            catalog=catalog,
            generator=KeywordGenerator(AIProviderFactory(settings, image_fetcher=image_fetcher)),
            analyzer=ASOAnalyzer(lookup, platform=settings.ASO_PLATFORM, delay_seconds=settings.SCORING_DELAY_SECONDS),
        )
        return await analyze_app(numeric_app_id, provider, context=context)
