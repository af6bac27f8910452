"""Build impact-analysis prompts for analysis producers."""

from __future__ import annotations

from market_impact.models.event import Event

ANALYSIS_SYSTEM_PROMPT = """You are a financial analysis AI that specializes in market impact predictions.
Always return valid JSON with detailed analysis and confidence metrics.
Never include markdown or explanations outside the JSON structure."""

OUTPUT_FORMAT = """{
  "affected_sectors": string[],
  "market_impact": string,
  "supply_chain_impact": string,
  "market_sentiment": {
    "short_term": "Positive" | "Negative" | "Neutral" | "Mixed",
    "long_term": "Positive" | "Negative" | "Neutral" | "Mixed"
  },
  "stock_predictions": {
    "positive": [{"symbol": string, "rationale": string}],
    "negative": [{"symbol": string, "rationale": string}],
    "confidence_scores": {
      "overall_prediction": number (0-1),
      "sector_impact": number (0-1),
      "market_direction": number (0-1)
    }
  },
  "risk_level": "low" | "medium" | "high" | "critical",
  "analysis_metadata": {
    "confidence_factors": string[],
    "uncertainty_factors": string[],
    "data_quality_score": number (0-1)
  }
}"""


class PromptBuilder:
    def build_event_prompt(self, event: Event) -> str:
        """Build the user prompt describing one event plus the expected JSON shape."""
        location = f"{event.city}, " if event.city else ""
        location += event.country or "Unknown"

        parts = []
        parts.append("<event>")
        parts.append(f"Event Type: {event.event_type or 'Unknown'}")
        parts.append(f"Location: {location}")
        parts.append(f"Description: {event.description or 'No description provided'}")
        parts.append(f"Affected Organizations: {self._format_organizations(event.affected_organizations)}")
        parts.append(f"Severity: {event.severity or 'Unknown'}")
        parts.append("</event>")

        parts.append("<instructions>")
        parts.append(
            "Analyze this event and provide a comprehensive market impact analysis. "
            "Consider historical precedents, sector correlations, and macroeconomic conditions. "
            "List 1-3 stocks likely to rise and 1-3 likely to fall, each with a rationale."
        )
        parts.append("</instructions>")

        parts.append("<output_format>")
        parts.append(OUTPUT_FORMAT)
        parts.append("</output_format>")

        return "\n".join(parts)

    @staticmethod
    def _format_organizations(orgs: list[str] | dict | str | None) -> str:
        if isinstance(orgs, list):
            names = [str(o) for o in orgs if o]
        elif isinstance(orgs, dict):
            names = [str(v) for v in orgs.values() if v]
        elif isinstance(orgs, str) and orgs:
            return orgs
        else:
            names = []
        return ", ".join(names) if names else "Unknown"
