"""SourcePrediction, MarketSentimentScore Pydantic models."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SourcePrediction(BaseModel):
    """One source's directional call on a subject. Never mutated after creation."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    source: str
    is_positive: bool
    confidence: float | None = None
    explanation: str | None = None
    timestamp: datetime | None = None

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float | None) -> float | None:
        if v is None:
            return None
        if not math.isfinite(v):
            raise ValueError("confidence must be a finite number")
        return min(max(v, 0.0), 1.0)

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class MarketSentimentScore(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    score: float = Field(default=50.0, ge=0.0, le=100.0)
    predictions: list[SourcePrediction] = []
    last_updated: datetime
