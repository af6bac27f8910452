"""ImpactAnalysis default policy and validate-or-default boundary."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from market_impact.config import Settings
from market_impact.errors import MalformedInputError, OutOfRangeValueError
from market_impact.models.analysis import (
    AnalysisMetadata,
    AnalysisOutcome,
    ConfidenceScores,
    ImpactAnalysis,
    MarketSentiment,
    RiskLevel,
    SentimentLabel,
    StockPrediction,
    StockPredictions,
)

logger = structlog.get_logger()

PLACEHOLDER_SYMBOL = "N/A"
PLACEHOLDER_RATIONALE = "No confident prediction available"

_OUT_OF_RANGE_ERRORS = {
    "greater_than_equal",
    "less_than_equal",
    "finite_number",
    "enum",
}

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


def default_analysis() -> ImpactAnalysis:
    """Fallback analysis used whenever a producer fails or returns bad data.

    Positive and negative predictions hold one placeholder entry each so that
    "analysis ran but found nothing confident" stays distinguishable from an
    empty list.
    """
    placeholder = StockPrediction(symbol=PLACEHOLDER_SYMBOL, rationale=PLACEHOLDER_RATIONALE)
    return ImpactAnalysis(
        affected_sectors=[],
        market_impact="Unable to analyze impact",
        supply_chain_impact="Unable to analyze supply chain impact",
        market_sentiment=MarketSentiment(
            short_term=SentimentLabel.NEUTRAL,
            long_term=SentimentLabel.NEUTRAL,
        ),
        stock_predictions=StockPredictions(
            positive=[placeholder],
            negative=[placeholder],
            confidence_scores=ConfidenceScores(
                overall_prediction=0.5,
                sector_impact=0.5,
                market_direction=0.5,
            ),
        ),
        risk_level=RiskLevel.MEDIUM,
        analysis_metadata=AnalysisMetadata(
            confidence_factors=[],
            uncertainty_factors=[],
            data_quality_score=0.5,
        ),
    )


def parse_analysis(raw: Any) -> ImpactAnalysis:
    """Strictly parse an untrusted payload. Raises MalformedInputError."""
    if isinstance(raw, ImpactAnalysis):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedInputError(f"expected a mapping, got {type(raw).__name__}")

    try:
        return ImpactAnalysis.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        message = f"{location}: {first['msg']}"
        if any(err["type"] in _OUT_OF_RANGE_ERRORS for err in e.errors()):
            raise OutOfRangeValueError(message) from e
        raise MalformedInputError(message) from e


def validate_analysis(raw: Any) -> AnalysisOutcome:
    """Validate a payload; the whole record is replaced by the default on any failure."""
    try:
        return AnalysisOutcome(analysis=parse_analysis(raw))
    except MalformedInputError as e:
        logger.warning(
            "analysis_validation_failed",
            error_type=type(e).__name__,
            reason=str(e),
        )
        return AnalysisOutcome(analysis=default_analysis(), used_default=True, reason=str(e))


def validate_or_default(raw: Any) -> ImpactAnalysis:
    return validate_analysis(raw).analysis


def extract_json(text: str) -> dict | None:
    """Try to extract a JSON object from producer text."""
    candidates = [text]
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    try:
        start = text.index("{")
        end = text.rindex("}") + 1
        candidates.append(text[start:end])
    except ValueError:
        pass

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def analysis_from_text(text: str) -> ImpactAnalysis:
    """Parse a producer's raw response text. Default analysis on failure."""
    if not text:
        return default_analysis()

    data = extract_json(text)
    if data is None:
        logger.warning("analysis_parse_error", raw_text=text[:200])
        return default_analysis()

    return validate_or_default(data)


def should_notify(analysis: ImpactAnalysis, settings: Settings | None = None) -> bool:
    """True when the event's risk level warrants a subscriber notification."""
    settings = settings or Settings()
    return analysis.risk_level.value in settings.NOTIFY_RISK_LEVELS
