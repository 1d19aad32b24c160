"""Tests for the HTTP front door."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from agent.graph import AnalysisResult
from lib.appstore import AppProfile
from lib.errors import ConfigError, NotFoundError, ProviderError, ScoringError
from lib.keyword_scoring import ASOAnalyzer, build_keyword_score
from service.service import app, get_keyword_analyzer, get_settings


@pytest.fixture
def lookup():
    async def fake_lookup(keyword, platform):
        if keyword == "zzz":
            raise ScoringError("lookup failed")
        return {"traffic": {"score": 7.25}, "difficulty": {"score": 3.0}}

    mock = AsyncMock()
    mock.lookup.side_effect = fake_lookup
    return mock


@pytest.fixture
def client(make_settings, lookup):
    app.dependency_overrides[get_settings] = lambda: make_settings(GEMINI_API_KEY="super-secret")
    app.dependency_overrides[get_keyword_analyzer] = lambda: ASOAnalyzer(lookup, delay_seconds=0)
    yield TestClient(app)
    app.dependency_overrides.clear()


def sample_result():
    return AnalysisResult(
        app_data=AppProfile(title="WhatsApp Messenger", description="Chat", app_id="310633997"),
        similar_apps=[AppProfile(title="Signal", description="Private", app_id="874139669")],
        main_app_keywords=["chat"],
        similar_app_keywords=["private messenger"],
        all_keywords=["chat", "private messenger"],
        keyword_analysis=[build_keyword_score("chat", 73, 35)],
    )


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_providers(client):
    body = client.get("/api/providers").json()

    assert [(p["id"], p["available"]) for p in body["providers"]] == [("gemini", True), ("claude", False)]
    assert body["configuration"]["GEMINI_API_KEY"] == "set"


def test_config_masks_credentials(client):
    response = client.get("/api/config")

    assert response.status_code == 200
    assert "super-secret" not in response.text
    assert response.json()["configuration"]["ANTHROPIC_API_KEY"] == "not set"


def test_analyze_app_renders_camel_case(client):
    with patch("service.service.run_app_analysis", new=AsyncMock(return_value=sample_result())) as run:
        response = client.post("/api/analyze-app", json={"appId": "310633997", "aiProvider": "gemini"})

    assert response.status_code == 200
    body = response.json()
    assert body["appData"]["title"] == "WhatsApp Messenger"
    assert body["similarApps"][0]["appId"] == "874139669"
    assert body["allKeywords"] == ["chat", "private messenger"]
    assert body["keywordAnalysis"][0] == {
        "keyword": "chat",
        "platform": "itunes",
        "trafficScore": 73,
        "difficultyScore": 35,
        "competitionLevel": "low",
        "trafficLevel": "high",
        "recommendation": "excellent",
        "error": None,
    }
    assert run.await_args.args[:2] == ("310633997", "gemini")


def test_analyze_app_requires_app_id(client):
    response = client.post("/api/analyze-app", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "appId is required"


@pytest.mark.parametrize("app_id", ["abc", "²", "①"])
def test_analyze_app_rejects_non_numeric_id(client, app_id):
    response = client.post("/api/analyze-app", json={"appId": app_id})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


@pytest.mark.parametrize("error, status", [
    (NotFoundError("App not found: 1"), 404),
    (ConfigError("GEMINI_API_KEY environment variable is required for Gemini provider"), 500),
    (ProviderError("Failed to parse Gemini response"), 502),
])
def test_analyze_app_error_mapping(client, error, status):
    with patch("service.service.run_app_analysis", new=AsyncMock(side_effect=error)):
        response = client.post("/api/analyze-app", json={"appId": 1})

    assert response.status_code == status
    assert set(response.json()) == {"error", "message"}


def test_analyze_keywords(client):
    response = client.post("/api/analyze-keywords", json={"keywords": [" chat ", "", "zzz"]})

    assert response.status_code == 200
    body = response.json()
    assert [item["keyword"] for item in body] == ["chat", "zzz"]
    assert body[0]["trafficScore"] == 73
    assert body[0]["recommendation"] == "excellent"
    assert body[1]["recommendation"] == "analysis_failed"
    assert body[1]["error"] == "lookup failed"


def test_analyze_keywords_requires_a_keyword(client):
    response = client.post("/api/analyze-keywords", json={"keywords": ["  ", ""]})

    assert response.status_code == 400


def test_analyze_keywords_limit(client):
    response = client.post("/api/analyze-keywords", json={"keywords": [f"k{i}" for i in range(21)]})

    assert response.status_code == 400
    assert "Maximum 20 keywords" in response.json()["message"]
