"""Unit tests for keyword score normalization and the scoring engine."""

import json
from dataclasses import asdict
from unittest.mock import AsyncMock, patch

import pytest

from lib.errors import ScoringError
from lib.keyword_scoring import (
    ASOAnalyzer,
    KeywordScore,
    Level,
    Recommendation,
    build_keyword_score,
    classify_level,
    failed_keyword_score,
    get_recommendation,
    scale_score,
)


def metrics(traffic, difficulty):
    return {"traffic": {"score": traffic}, "difficulty": {"score": difficulty}}


@pytest.mark.parametrize("raw, expected", [
    (7.25, 73),
    (7.24, 72),
    (6.45, 65),
    (6.44, 64),
    (0.05, 1),
    (0, 0),
    (10, 100),
    (12.5, 100),
    (-3, 0),
    ("4.2", 42),
])
def test_scale_score(raw, expected):
    assert scale_score(raw) == expected


@pytest.mark.parametrize("raw", [None, "n/a", float("nan"), True])
def test_scale_score_missing_or_invalid_counts_as_zero(raw):
    assert scale_score(raw) == 0


@pytest.mark.parametrize("score, level", [
    (100, Level.VERY_HIGH),
    (80, Level.VERY_HIGH),
    (79, Level.HIGH),
    (60, Level.HIGH),
    (59, Level.MEDIUM),
    (40, Level.MEDIUM),
    (39, Level.LOW),
    (20, Level.LOW),
    (19, Level.VERY_LOW),
    (0, Level.VERY_LOW),
])
def test_classify_level_boundaries(score, level):
    assert classify_level(score) == level


def test_classify_level_is_monotonic():
    order = [Level.VERY_LOW, Level.LOW, Level.MEDIUM, Level.HIGH, Level.VERY_HIGH]
    ranks = [order.index(classify_level(score)) for score in range(101)]
    assert ranks == sorted(ranks)


@pytest.mark.parametrize("traffic, difficulty, expected", [
    (60, 40, Recommendation.EXCELLENT),
    (95, 0, Recommendation.EXCELLENT),
    (40, 50, Recommendation.GOOD),
    (59, 41, Recommendation.GOOD),
    (60, 70, Recommendation.CHALLENGING),
    (90, 95, Recommendation.CHALLENGING),
    (30, 60, Recommendation.AVOID),
    (0, 100, Recommendation.AVOID),
    (60, 60, Recommendation.CONSIDER),
    (35, 55, Recommendation.CONSIDER),
    (10, 10, Recommendation.CONSIDER),
])
def test_get_recommendation(traffic, difficulty, expected):
    assert get_recommendation(traffic, difficulty) == expected


def test_build_keyword_score_classifies_both_axes():
    score = build_keyword_score("chat", 73, 35)

    assert score.traffic_level == Level.HIGH
    assert score.competition_level == Level.LOW
    assert score.recommendation == Recommendation.EXCELLENT
    assert score.platform == "itunes"
    assert score.error is None


def test_failed_keyword_score_shape():
    score = failed_keyword_score("zzz", "boom")

    assert score.traffic_score == 0
    assert score.difficulty_score == 0
    assert score.competition_level == Level.UNKNOWN
    assert score.traffic_level == Level.UNKNOWN
    assert score.recommendation == Recommendation.ANALYSIS_FAILED
    assert score.error == "boom"


@pytest.mark.anyio
async def test_analyze_keyword_scales_lookup_scores():
    lookup = AsyncMock()
    lookup.lookup.return_value = metrics(7.25, 3.5)
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    score = await analyzer.analyze_keyword("chat")

    lookup.lookup.assert_awaited_once_with("chat", "itunes")
    assert score.traffic_score == 73
    assert score.difficulty_score == 35
    assert score.recommendation == Recommendation.EXCELLENT


@pytest.mark.anyio
async def test_analyze_keyword_missing_sections_count_as_zero():
    lookup = AsyncMock()
    lookup.lookup.return_value = {"traffic": {}, "difficulty": None}
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    score = await analyzer.analyze_keyword("quiet")

    assert score.traffic_score == 0
    assert score.difficulty_score == 0
    assert score.traffic_level == Level.VERY_LOW
    assert score.error is None


@pytest.mark.anyio
async def test_analyze_keyword_is_idempotent():
    lookup = AsyncMock()
    lookup.lookup.return_value = metrics(5.5, 4.1)
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    first = await analyzer.analyze_keyword("photo editor")
    second = await analyzer.analyze_keyword("photo editor")

    assert first == second
    assert json.dumps(asdict(first)) == json.dumps(asdict(second))


@pytest.mark.anyio
async def test_analyze_keywords_absorbs_failures(caplog):
    async def fake_lookup(keyword, platform):
        if keyword == "zzz":
            raise ScoringError("lookup failed")
        return metrics(6.0, 2.0)

    lookup = AsyncMock()
    lookup.lookup.side_effect = fake_lookup
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    scores = await analyzer.analyze_keywords(["zzz", "abc"])

    assert [s.keyword for s in scores] == ["zzz", "abc"]
    assert scores[0].recommendation == Recommendation.ANALYSIS_FAILED
    assert scores[0].error == "lookup failed"
    assert scores[1].traffic_score == 60
    assert scores[1].difficulty_score == 20
    assert scores[1].recommendation == Recommendation.EXCELLENT
    assert "Failed to analyze keyword \"zzz\"" in caplog.text


@pytest.mark.anyio
async def test_analyze_keywords_pauses_between_lookups_only():
    lookup = AsyncMock()
    lookup.lookup.return_value = metrics(1, 1)
    analyzer = ASOAnalyzer(lookup, delay_seconds=0.5)

    with patch("lib.keyword_scoring.asyncio.sleep", new_callable=AsyncMock) as sleep:
        scores = await analyzer.analyze_keywords(["a", "b", "c"])

    assert len(scores) == 3
    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.5)


@pytest.mark.anyio
async def test_analyze_keywords_empty_list():
    lookup = AsyncMock()
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    assert await analyzer.analyze_keywords([]) == []
    lookup.lookup.assert_not_awaited()


@pytest.mark.anyio
async def test_analyze_keywords_uses_configured_platform():
    lookup = AsyncMock()
    lookup.lookup.return_value = metrics(2, 2)
    analyzer = ASOAnalyzer(lookup, platform="android", delay_seconds=0)

    scores = await analyzer.analyze_keywords(["notes"])

    lookup.lookup.assert_awaited_once_with("notes", "android")
    assert scores[0].platform == "android"


@pytest.mark.anyio
async def test_find_keyword_opportunities_ranks_and_summarizes():
    table = {
        "excellent": metrics(9.0, 1.0),
        "good": metrics(5.0, 4.0),
        "good-more-traffic": metrics(5.5, 4.0),
        "avoid": metrics(1.0, 9.0),
        "consider": metrics(3.5, 5.5),
    }

    async def fake_lookup(keyword, platform):
        if keyword == "broken":
            raise ScoringError("down")
        return table[keyword]

    lookup = AsyncMock()
    lookup.lookup.side_effect = fake_lookup
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    result = await analyzer.find_keyword_opportunities(
        ["avoid", "good", "broken", "excellent", "consider", "good-more-traffic"],
        top_n=4
    )

    assert result.total_analyzed == 6
    assert [s.keyword for s in result.top_opportunities] == [
        "excellent", "good-more-traffic", "good", "consider"
    ]
    assert result.summary == {
        "excellent": 1,
        "good": 2,
        "consider": 1,
        "challenging": 0,
        "avoid": 1,
        "failed": 1,
    }
    assert all(isinstance(s, KeywordScore) for s in result.top_opportunities)


@pytest.mark.anyio
async def test_find_keyword_opportunities_breaks_traffic_ties_on_difficulty():
    table = {
        "harder": metrics(5.0, 4.0),
        "easier": metrics(5.0, 2.0),
        "more-traffic": metrics(5.5, 4.5),
    }
    lookup = AsyncMock()
    lookup.lookup.side_effect = lambda keyword, platform: table[keyword]
    analyzer = ASOAnalyzer(lookup, delay_seconds=0)

    result = await analyzer.find_keyword_opportunities(["harder", "easier", "more-traffic"])

    assert {s.recommendation for s in result.top_opportunities} == {Recommendation.GOOD}
    assert [s.keyword for s in result.top_opportunities] == ["more-traffic", "easier", "harder"]
