"""Shared fixtures for market-impact tests."""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from market_impact.config import Settings

NOW = datetime(2026, 3, 18, 18, 0, tzinfo=timezone.utc)
HALF_LIFE = 3600


# --- Analysis payloads ---


VALID_ANALYSIS = {
    "affected_sectors": ["Semiconductors", "Shipping"],
    "market_impact": "Export controls tighten supply of advanced chips.",
    "supply_chain_impact": "Fab equipment deliveries delayed by one to two quarters.",
    "market_sentiment": {"short_term": "Negative", "long_term": "Mixed"},
    "stock_predictions": {
        "positive": [
            {"symbol": "INTC", "rationale": "Domestic capacity gains share."},
        ],
        "negative": [
            {"symbol": "NVDA", "rationale": "Lost export revenue."},
            {"symbol": "ASML", "rationale": ""},
        ],
        "confidence_scores": {
            "overall_prediction": 0.8,
            "sector_impact": 0.65,
            "market_direction": 0.7,
        },
    },
    "risk_level": "high",
    "analysis_metadata": {
        "confidence_factors": ["Historical precedent"],
        "uncertainty_factors": ["Regulatory response pending"],
        "data_quality_score": 0.9,
    },
}


@pytest.fixture
def valid_analysis_dict() -> dict:
    return copy.deepcopy(VALID_ANALYSIS)


# --- Predictions ---


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DEFAULT_PREDICTION_WEIGHT=0.5,
        RECENCY_WEIGHTING_ENABLED=True,
        RECENCY_HALF_LIFE_SECONDS=HALF_LIFE,
        SUPERSEDE_BY_SOURCE=False,
        SOURCE_WEIGHTS={},
    )
