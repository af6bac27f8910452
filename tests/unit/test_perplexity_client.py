"""Unit tests for PerplexityAnalyzer — httpx producer with retry and fallback."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from tenacity import wait_none

from market_impact.config import Settings
from market_impact.impact_model import default_analysis
from market_impact.models.analysis import ImpactAnalysis, RiskLevel
from market_impact.models.event import Event
from market_impact.perplexity_client import PerplexityAnalyzer


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    return Settings(
        PERPLEXITY_API_KEY="test-pplx-key",
        PERPLEXITY_MODEL="sonar-pro",
    )


@pytest.fixture
def analyzer(settings):
    return PerplexityAnalyzer(settings=settings)


@pytest.fixture
def sample_event():
    return Event(id="evt-1", event_type="trade_policy", country="United States", severity="high")


@pytest.fixture(autouse=True)
def no_retry_wait():
    with patch.object(PerplexityAnalyzer._call_api_with_retry.retry, "wait", wait_none()):
        yield


def _api_response(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}]}


def _mock_http(response=None, side_effect=None):
    mock_http = AsyncMock()
    if side_effect is not None:
        mock_http.post = AsyncMock(side_effect=side_effect)
    else:
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = response
        mock_response.raise_for_status = MagicMock()
        mock_http.post = AsyncMock(return_value=mock_response)
    mock_http.__aenter__ = AsyncMock(return_value=mock_http)
    mock_http.__aexit__ = AsyncMock(return_value=False)
    return mock_http


# ---------------------------------------------------------------------------
# analyze()
# ---------------------------------------------------------------------------


class TestAnalyze:
    async def test_returns_validated_analysis(self, analyzer, sample_event, valid_analysis_dict):
        mock_http = _mock_http(_api_response(json.dumps(valid_analysis_dict)))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            analysis = await analyzer.analyze(sample_event)

        assert isinstance(analysis, ImpactAnalysis)
        assert analysis.risk_level is RiskLevel.HIGH
        assert analysis.model_dump(mode="json") == valid_analysis_dict

    async def test_fenced_content_is_parsed(self, analyzer, sample_event, valid_analysis_dict):
        content = f"```json\n{json.dumps(valid_analysis_dict)}\n```"
        mock_http = _mock_http(_api_response(content))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            analysis = await analyzer.analyze(sample_event)

        assert analysis.affected_sectors == valid_analysis_dict["affected_sectors"]

    async def test_invalid_schema_returns_default(self, analyzer, sample_event, valid_analysis_dict):
        valid_analysis_dict["risk_level"] = "extreme"
        mock_http = _mock_http(_api_response(json.dumps(valid_analysis_dict)))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            analysis = await analyzer.analyze(sample_event)

        assert analysis == default_analysis()

    async def test_non_json_content_returns_default(self, analyzer, sample_event):
        mock_http = _mock_http(_api_response("Sorry, I cannot help with that."))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            analysis = await analyzer.analyze(sample_event)

        assert analysis == default_analysis()

    async def test_missing_api_key_returns_default_without_call(self, sample_event):
        analyzer = PerplexityAnalyzer(settings=Settings(PERPLEXITY_API_KEY=""))
        with patch("market_impact.perplexity_client.httpx.AsyncClient") as MockHttpx:
            analysis = await analyzer.analyze(sample_event)

        assert analysis == default_analysis()
        MockHttpx.assert_not_called()


# ---------------------------------------------------------------------------
# _call_api()
# ---------------------------------------------------------------------------


class TestCallApi:
    async def test_sends_model_and_prompt(self, analyzer):
        mock_http = _mock_http(_api_response("{}"))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            await analyzer._call_api("event prompt")

        body = mock_http.post.call_args.kwargs["json"]
        assert body["model"] == "sonar-pro"
        assert body["messages"][1] == {"role": "user", "content": "event prompt"}
        headers = mock_http.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer test-pplx-key"

    async def test_api_error_returns_empty(self, analyzer):
        mock_http = _mock_http(side_effect=Exception("Connection error"))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            result = await analyzer._call_api("prompt")

        assert result == ""

    async def test_malformed_envelope_returns_empty(self, analyzer):
        mock_http = _mock_http({"choices": []})
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            result = await analyzer._call_api("prompt")

        assert result == ""

    async def test_retries_then_succeeds(self, analyzer, valid_analysis_dict):
        ok = MagicMock()
        ok.json.return_value = _api_response(json.dumps(valid_analysis_dict))
        ok.raise_for_status = MagicMock()
        mock_http = _mock_http(side_effect=[Exception("502"), Exception("502"), ok])
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            result = await analyzer._call_api("prompt")

        assert json.loads(result) == valid_analysis_dict
        assert mock_http.post.call_count == 3

    async def test_gives_up_after_three_attempts(self, analyzer):
        mock_http = _mock_http(side_effect=Exception("down"))
        with patch("market_impact.perplexity_client.httpx.AsyncClient", return_value=mock_http):
            result = await analyzer._call_api("prompt")

        assert result == ""
        assert mock_http.post.call_count == 3
