"""Anthropic AsyncClient impact-analysis producer."""

from __future__ import annotations

import asyncio

import structlog
from anthropic import AsyncAnthropic

from market_impact.config import Settings
from market_impact.impact_model import analysis_from_text
from market_impact.models.analysis import ImpactAnalysis
from market_impact.models.event import Event
from market_impact.prompt_builder import ANALYSIS_SYSTEM_PROMPT, PromptBuilder

logger = structlog.get_logger()


class ClaudeAnalyzer:
    def __init__(self, settings: Settings, prompt_builder: PromptBuilder | None = None) -> None:
        self.settings = settings
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def analyze(self, event: Event) -> ImpactAnalysis:
        """Analyze one event. Default analysis on timeout, error or bad JSON."""
        prompt = self.prompt_builder.build_event_prompt(event)
        text = await self._call(prompt)
        return analysis_from_text(text)

    async def _call(self, prompt: str) -> str:
        """Low-level Anthropic API call with timeout."""
        try:
            client = AsyncAnthropic(api_key=self.settings.ANTHROPIC_API_KEY)
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.settings.CLAUDE_MODEL,
                    max_tokens=self.settings.CLAUDE_MAX_TOKENS,
                    temperature=0.1,
                    system=ANALYSIS_SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.settings.MAX_CLAUDE_TIMEOUT_SECONDS,
            )
            text = response.content[0].text
            logger.info("claude_call", model=self.settings.CLAUDE_MODEL, chars=len(text))
            return text
        except asyncio.TimeoutError:
            logger.warning("claude_timeout", timeout=self.settings.MAX_CLAUDE_TIMEOUT_SECONDS)
            return ""
        except Exception as e:
            logger.warning("claude_error", error=str(e))
            return ""
