"""ImpactAnalysis and nested Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictStr

Score = Annotated[float, Field(ge=0.0, le=1.0, strict=True, allow_inf_nan=False)]
Symbol = Annotated[str, Field(min_length=1, strict=True)]


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SentimentLabel(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"
    MIXED = "Mixed"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class MarketSentiment(_Frozen):
    short_term: SentimentLabel
    long_term: SentimentLabel


class StockPrediction(_Frozen):
    symbol: Symbol
    rationale: StrictStr


class ConfidenceScores(_Frozen):
    overall_prediction: Score
    sector_impact: Score
    market_direction: Score


class StockPredictions(_Frozen):
    positive: list[StockPrediction]
    negative: list[StockPrediction]
    confidence_scores: ConfidenceScores


class AnalysisMetadata(_Frozen):
    confidence_factors: list[StrictStr]
    uncertainty_factors: list[StrictStr]
    data_quality_score: Score


class ImpactAnalysis(_Frozen):
    """Market impact of one event. Replaced wholesale on re-analysis."""

    affected_sectors: list[StrictStr]
    market_impact: StrictStr
    supply_chain_impact: StrictStr
    market_sentiment: MarketSentiment
    stock_predictions: StockPredictions
    risk_level: RiskLevel
    analysis_metadata: AnalysisMetadata


class AnalysisOutcome(_Frozen):
    """Always-valid result of validating an untrusted analysis payload.

    ``used_default`` tells callers whether ``analysis`` came from the producer
    or is the fallback; ``reason`` carries the first validation failure.
    """

    analysis: ImpactAnalysis
    used_default: bool = False
    reason: str = ""
