"""ASO keyword scoring: traffic and difficulty normalization, levels and recommendations."""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Optional

from lib.aso_service_client import KeywordLookup

logger = logging.getLogger(__name__)


class Level(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
    UNKNOWN = "unknown"


class Recommendation(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    CONSIDER = "consider"
    CHALLENGING = "challenging"
    AVOID = "avoid"
    ANALYSIS_FAILED = "analysis_failed"


RECOMMENDATION_RANK = {
    Recommendation.EXCELLENT: 5,
    Recommendation.GOOD: 4,
    Recommendation.CONSIDER: 3,
    Recommendation.CHALLENGING: 2,
    Recommendation.AVOID: 1,
    Recommendation.ANALYSIS_FAILED: 0,
}

LEVEL_THRESHOLDS = [
    (80, Level.VERY_HIGH),
    (60, Level.HIGH),
    (40, Level.MEDIUM),
    (20, Level.LOW),
]


@dataclass(frozen=True)
class KeywordScore:
    keyword: str
    traffic_score: int
    difficulty_score: int
    competition_level: Level
    traffic_level: Level
    recommendation: Recommendation
    platform: str = "itunes"
    error: Optional[str] = None


@dataclass
class KeywordOpportunities:
    platform: str
    total_analyzed: int
    top_opportunities: List[KeywordScore]
    summary: Dict[str, int] = field(default_factory=dict)


def scale_score(raw) -> int:
    """
    Convert an upstream 0-10 score to the 0-100 scale.

    Rounds half up on the decimal value, so 7.25 gives 73 and 7.24 gives 72.
    Missing or non-numeric scores count as 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        scaled = (Decimal(str(raw)) * 10).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return 0
    if not scaled.is_finite():
        return 0
    return max(0, min(100, int(scaled)))


def classify_level(score: int) -> Level:
    """Map a 0-100 score to a level; used for both traffic and difficulty."""
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return Level.VERY_LOW


def get_recommendation(traffic_score: int, difficulty_score: int) -> Recommendation:
    # High traffic, low difficulty
    if traffic_score >= 60 and difficulty_score <= 40:
        return Recommendation.EXCELLENT

    # Medium traffic, low difficulty
    if traffic_score >= 40 and difficulty_score <= 50:
        return Recommendation.GOOD

    # High traffic, high difficulty
    if traffic_score >= 60 and difficulty_score >= 70:
        return Recommendation.CHALLENGING

    # Low traffic, high difficulty
    if traffic_score <= 30 and difficulty_score >= 60:
        return Recommendation.AVOID

    return Recommendation.CONSIDER


def build_keyword_score(keyword: str, traffic_score: int, difficulty_score: int, platform: str = "itunes") -> KeywordScore:
    return KeywordScore(
        keyword=keyword,
        traffic_score=traffic_score,
        difficulty_score=difficulty_score,
        competition_level=classify_level(difficulty_score),
        traffic_level=classify_level(traffic_score),
        recommendation=get_recommendation(traffic_score, difficulty_score),
        platform=platform,
    )


def failed_keyword_score(keyword: str, error: str, platform: str = "itunes") -> KeywordScore:
    return KeywordScore(
        keyword=keyword,
        traffic_score=0,
        difficulty_score=0,
        competition_level=Level.UNKNOWN,
        traffic_level=Level.UNKNOWN,
        recommendation=Recommendation.ANALYSIS_FAILED,
        platform=platform,
        error=error,
    )


def _raw_score(metrics: Dict, key: str):
    section = metrics.get(key)
    if isinstance(section, dict):
        return section.get("score")
    return None


def rank_key(score: KeywordScore):
    """Sort key: best recommendation first, then more traffic, then less difficulty."""
    return (-RECOMMENDATION_RANK[score.recommendation], -score.traffic_score, score.difficulty_score)


class ASOAnalyzer:
    """
    Scores keywords through an external lookup service.

    Lookups run one at a time with a fixed pause between them. A failed lookup
    never raises; it yields a KeywordScore marked analysis_failed.
    """

    def __init__(self, lookup: KeywordLookup, platform: str = "itunes", delay_seconds: float = 0.5):
        self.lookup = lookup
        self.platform = platform
        self.delay_seconds = delay_seconds

    async def analyze_keyword(self, keyword: str) -> KeywordScore:
        logger.info(f"Analyzing keyword: \"{keyword}\" on {self.platform}...")
        try:
            metrics = await self.lookup.lookup(keyword, self.platform)
            traffic_score = scale_score(_raw_score(metrics, "traffic"))
            difficulty_score = scale_score(_raw_score(metrics, "difficulty"))
        except Exception as e:
            logger.warning(f"Failed to analyze keyword \"{keyword}\": {e}")
            return failed_keyword_score(keyword, str(e), self.platform)

        return build_keyword_score(keyword, traffic_score, difficulty_score, self.platform)

    async def analyze_keywords(self, keywords: List[str]) -> List[KeywordScore]:
        logger.info(f"Analyzing {len(keywords)} keywords on {self.platform}...")

        results = []
        for index, keyword in enumerate(keywords):
            if index and self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)
            results.append(await self.analyze_keyword(keyword))
        return results

    async def find_keyword_opportunities(self, keywords: List[str], top_n: int = 10) -> KeywordOpportunities:
        analyses = await self.analyze_keywords(keywords)
        ranked = sorted(analyses, key=rank_key)

        def count(recommendation: Recommendation) -> int:
            return sum(1 for a in analyses if a.recommendation == recommendation)

        return KeywordOpportunities(
            platform=self.platform,
            total_analyzed=len(analyses),
            top_opportunities=ranked[:top_n],
            summary={
                "excellent": count(Recommendation.EXCELLENT),
                "good": count(Recommendation.GOOD),
                "consider": count(Recommendation.CONSIDER),
                "challenging": count(Recommendation.CHALLENGING),
                "avoid": count(Recommendation.AVOID),
                "failed": count(Recommendation.ANALYSIS_FAILED),
            },
        )
