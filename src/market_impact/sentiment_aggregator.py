"""Confidence- and recency-weighted market sentiment aggregation."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import structlog

from market_impact.config import Settings
from market_impact.models.sentiment import MarketSentimentScore, SourcePrediction

logger = structlog.get_logger()

NEUTRAL_SCORE = 50.0


def half_lives_elapsed(timestamp: datetime | None, now: datetime, half_life_seconds: float) -> float:
    """Age of ``timestamp`` in half-lives. Undated or future -> 0."""
    if timestamp is None or half_life_seconds <= 0:
        return 0.0
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    age = (now - timestamp).total_seconds()
    if age <= 0:
        return 0.0
    return age / half_life_seconds


def recency_weight(timestamp: datetime | None, now: datetime, half_life_seconds: float) -> float:
    """Weight halves every ``half_life_seconds`` of age. Undated or future -> 1.0."""
    return 0.5 ** half_lives_elapsed(timestamp, now, half_life_seconds)


def sentiment_label(score: float) -> str:
    if score >= 75:
        return "Very Bullish"
    if score >= 60:
        return "Bullish"
    if score >= 50:
        return "Slightly Bullish"
    if score >= 40:
        return "Slightly Bearish"
    if score >= 25:
        return "Bearish"
    return "Very Bearish"


class SentimentAggregator:
    """
    Fold a subject's full prediction history into one 0-100 score:

        weight = confidence (or default) * source multiplier * recency
        net    = sum(+/- weight) / sum(weight)        in [-1, 1]
        score  = 50 + 50 * net                        in [0, 100]

    Always recomputed from the whole history because recency depends on ``now``.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    def aggregate(
        self,
        predictions: Sequence[SourcePrediction],
        now: datetime | None = None,
    ) -> MarketSentimentScore:
        now = now or datetime.now(timezone.utc)
        history = list(predictions)
        if not history:
            return MarketSentimentScore(score=NEUTRAL_SCORE, predictions=[], last_updated=now)

        terms = [
            (prediction, self.base_weight(prediction), self._half_lives(prediction, now))
            for prediction in self._contributing(history)
        ]
        # Decay is measured from the freshest weighted prediction so that very
        # old histories keep their ratio instead of underflowing to zero.
        live = [half_lives for _, base, half_lives in terms if base > 0]
        shift = min(live, default=0.0)

        signed_total = 0.0
        weight_total = 0.0
        for prediction, base, half_lives in terms:
            if base <= 0:
                continue
            weight = base * 0.5 ** (half_lives - shift)
            signed_total += weight if prediction.is_positive else -weight
            weight_total += weight

        if weight_total <= 0:
            score = NEUTRAL_SCORE
        else:
            score = min(max(NEUTRAL_SCORE + NEUTRAL_SCORE * (signed_total / weight_total), 0.0), 100.0)

        logger.debug(
            "sentiment_aggregated",
            predictions=len(history),
            score=round(score, 2),
        )
        return MarketSentimentScore(score=score, predictions=history, last_updated=now)

    def base_weight(self, prediction: SourcePrediction) -> float:
        """Confidence (or the default) times the source multiplier."""
        if prediction.confidence is None:
            base = self.settings.DEFAULT_PREDICTION_WEIGHT
        else:
            base = prediction.confidence
        return base * self.settings.SOURCE_WEIGHTS.get(prediction.source, 1.0)

    def _half_lives(self, prediction: SourcePrediction, now: datetime) -> float:
        if not self.settings.RECENCY_WEIGHTING_ENABLED:
            return 0.0
        return half_lives_elapsed(prediction.timestamp, now, self.settings.RECENCY_HALF_LIFE_SECONDS)

    def _contributing(self, history: list[SourcePrediction]) -> list[SourcePrediction]:
        """Predictions that count toward the score (latest per source when superseding)."""
        if not self.settings.SUPERSEDE_BY_SOURCE:
            return history

        latest: dict[str, SourcePrediction] = {}
        for prediction in history:
            current = latest.get(prediction.source)
            if current is None or _recency_key(prediction) >= _recency_key(current):
                latest[prediction.source] = prediction
        return list(latest.values())


def _recency_key(prediction: SourcePrediction) -> datetime:
    # Undated predictions count as the most recent observation.
    return prediction.timestamp or datetime.max.replace(tzinfo=timezone.utc)


def aggregate(
    predictions: Sequence[SourcePrediction],
    now: datetime | None = None,
    settings: Settings | None = None,
) -> MarketSentimentScore:
    return SentimentAggregator(settings).aggregate(predictions, now=now)
