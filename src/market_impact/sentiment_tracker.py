"""Per-subject prediction history with serialized append + recompute."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from market_impact.sentiment_aggregator import SentimentAggregator

if TYPE_CHECKING:
    from market_impact.models.sentiment import MarketSentimentScore, SourcePrediction

logger = structlog.get_logger()


class SentimentTracker:
    """
    Append-only prediction history per subject (event id or security symbol).

    Structure: history[subject] = [SourcePrediction, ...] in arrival order.
    Every append holds the subject's lock until the recomputed score is stored,
    so two writers never recompute over a half-applied history.
    """

    def __init__(self, aggregator: SentimentAggregator | None = None) -> None:
        self.aggregator = aggregator or SentimentAggregator()
        self.history_by_subject: dict[str, list[SourcePrediction]] = defaultdict(list)
        self.scores: dict[str, MarketSentimentScore] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def append(
        self,
        subject: str,
        prediction: SourcePrediction,
        now: datetime | None = None,
    ) -> MarketSentimentScore:
        """Append one prediction and recompute the subject's score."""
        return await self.extend(subject, [prediction], now=now)

    async def extend(
        self,
        subject: str,
        predictions: Iterable[SourcePrediction],
        now: datetime | None = None,
    ) -> MarketSentimentScore:
        """Append a batch in order, then recompute once."""
        async with self._locks[subject]:
            history = self.history_by_subject[subject]
            added = list(predictions)
            history.extend(added)
            score = self.aggregator.aggregate(history, now=now)
            self.scores[subject] = score
        logger.info(
            "sentiment_recomputed",
            subject=subject,
            added=len(added),
            total=len(score.predictions),
            score=round(score.score, 2),
        )
        return score

    async def backfill(self, subject: str, predictions: Iterable[SourcePrediction]) -> None:
        """Seed history from an external store without recomputing."""
        async with self._locks[subject]:
            added = list(predictions)
            self.history_by_subject[subject].extend(added)
            self.scores.pop(subject, None)
        logger.info("sentiment_history_backfilled", subject=subject, count=len(added))

    def history(self, subject: str) -> list[SourcePrediction]:
        return list(self.history_by_subject.get(subject, []))

    def score(self, subject: str, now: datetime | None = None) -> MarketSentimentScore:
        """Score at ``now``; without a clock, the last computed score when one exists."""
        if now is None:
            cached = self.scores.get(subject)
            if cached is not None:
                return cached
        return self.aggregator.aggregate(self.history(subject), now=now)

    async def forget(self, subject: str) -> None:
        """Drop a subject's history, cached score and lock."""
        async with self._locks[subject]:
            dropped = len(self.history_by_subject.pop(subject, []))
            self.scores.pop(subject, None)
        self._locks.pop(subject, None)
        logger.info("sentiment_subject_forgotten", subject=subject, dropped=dropped)

    def subjects(self) -> list[str]:
        return [s for s, h in self.history_by_subject.items() if h]
