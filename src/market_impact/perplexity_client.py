"""Perplexity sonar-pro impact-analysis producer."""

from __future__ import annotations

import httpx
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from market_impact.config import Settings
from market_impact.impact_model import analysis_from_text, default_analysis
from market_impact.models.analysis import ImpactAnalysis
from market_impact.models.event import Event
from market_impact.prompt_builder import ANALYSIS_SYSTEM_PROMPT, PromptBuilder

logger = structlog.get_logger()

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"


class PerplexityAnalyzer:
    def __init__(self, settings: Settings, prompt_builder: PromptBuilder | None = None) -> None:
        self.settings = settings
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def analyze(self, event: Event) -> ImpactAnalysis:
        """Analyze one event. Default analysis on any failure."""
        if not self.settings.PERPLEXITY_API_KEY:
            logger.warning("perplexity_not_configured", event_id=event.id)
            return default_analysis()

        prompt = self.prompt_builder.build_event_prompt(event)
        content = await self._call_api(prompt)
        analysis = analysis_from_text(content)
        logger.info(
            "perplexity_analysis",
            event_id=event.id,
            risk_level=analysis.risk_level.value,
            chars=len(content),
        )
        return analysis

    async def _call_api(self, prompt: str) -> str:
        """Return the response message content, or "" on error."""
        try:
            raw = await self._call_api_with_retry(prompt)
            return raw["choices"][0]["message"]["content"].strip()
        except Exception as e:
            logger.warning("perplexity_api_error", error=str(e))
            return ""

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10), reraise=True)
    async def _call_api_with_retry(self, prompt: str) -> dict:
        """Low-level HTTP POST with retry on transient errors."""
        async with httpx.AsyncClient() as http:
            response = await http.post(
                PERPLEXITY_API_URL,
                headers={
                    "Authorization": f"Bearer {self.settings.PERPLEXITY_API_KEY}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.settings.PERPLEXITY_MODEL,
                    "messages": [
                        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": 0.1,
                    "max_tokens": 1000,
                },
                timeout=self.settings.PERPLEXITY_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return response.json()
