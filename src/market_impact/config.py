"""Settings (pydantic-settings, loaded from env vars)."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings

SourceMultiplier = Annotated[float, Field(ge=0.0)]


class Settings(BaseSettings):
    # --- Anthropic ---
    ANTHROPIC_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-sonnet-4-5"
    CLAUDE_MAX_TOKENS: int = 2048
    MAX_CLAUDE_TIMEOUT_SECONDS: int = 30

    # --- Perplexity ---
    PERPLEXITY_API_KEY: str = ""
    PERPLEXITY_MODEL: str = "sonar-pro"
    PERPLEXITY_TIMEOUT_SECONDS: float = 30.0

    # --- Sentiment Aggregation ---
    # Weight of a prediction without a confidence; stays inside the confidence range.
    DEFAULT_PREDICTION_WEIGHT: float = Field(default=0.5, ge=0.0, le=1.0)
    RECENCY_WEIGHTING_ENABLED: bool = True
    RECENCY_HALF_LIFE_SECONDS: int = 86400
    SUPERSEDE_BY_SOURCE: bool = False
    SOURCE_WEIGHTS: dict[str, SourceMultiplier] = {}

    # --- Notifications ---
    NOTIFY_RISK_LEVELS: list[str] = ["high", "critical"]

    model_config = {"env_prefix": "", "case_sensitive": True}
