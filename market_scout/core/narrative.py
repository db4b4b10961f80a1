"""Strategic narrative generation through the OpenAI chat completions API."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import openai

from market_scout.models import AnalysisResult, BusinessRecord, NarrativeInsights

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert business analyst specializing in home service industries. "
    "Provide actionable insights based on competitive analysis data. "
    "Respond with JSON in the exact format requested."
)
LIST_FIELDS = (
    "key_findings",
    "strategic_recommendations",
    "market_opportunities",
    "competitive_advantages",
    "action_items",
    "risk_factors",
)
DEFAULT_SUMMARY = "Analysis completed successfully."


def build_prompt(target: BusinessRecord, result: AnalysisResult) -> str:
    top_competitors = "\n".join(
        f"{i}. {c.name} - {c.rating}/5 ({c.review_count} reviews)"
        for i, c in enumerate(result.competitors[:5], start=1)
    )
    return f"""Analyze this home service business competitive landscape and provide strategic insights:

TARGET BUSINESS:
- Name: {target.name}
- Service Type: {target.service_type}
- Rating: {target.rating}/5 stars
- Reviews: {target.review_count}
- Location: {target.address}

COMPETITIVE ANALYSIS:
- Market Position: #{result.market_position} out of {len(result.competitors) + 1}
- Competitive Score: {result.competitive_score}/100
- Performance Score: {result.performance_score}/64
- Market Share: {result.market_analysis.market_share}%

TOP COMPETITORS:
{top_competitors or "None found"}

CURRENT STRENGTHS: {", ".join(result.strengths)}
CURRENT OPPORTUNITIES: {", ".join(result.opportunities)}

Provide a comprehensive analysis in JSON format:
{{
  "executive_summary": "2-3 sentence overview of competitive position",
  "key_findings": ["finding1", "finding2", "finding3"],
  "strategic_recommendations": ["rec1", "rec2", "rec3", "rec4"],
  "market_opportunities": ["opp1", "opp2", "opp3"],
  "competitive_advantages": ["advantage1", "advantage2"],
  "action_items": ["action1", "action2", "action3"],
  "risk_factors": ["risk1", "risk2"]
}}"""


def parse_insights(payload: Dict[str, Any]) -> NarrativeInsights:
    """Coerce a model response into NarrativeInsights, defaulting missing fields."""
    lists = {}
    for name in LIST_FIELDS:
        value = payload.get(name) or []
        if isinstance(value, str):
            value = [value]
        lists[name] = tuple(str(item) for item in value if item)

    summary = payload.get("executive_summary")
    return NarrativeInsights(
        executive_summary=str(summary) if summary else DEFAULT_SUMMARY,
        **lists,
    )


class OpenAINarrativeEnricher:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = client or openai.OpenAI(api_key=api_key)

    def generate(self, target: BusinessRecord, result: AnalysisResult) -> NarrativeInsights:
        logger.info("Requesting AI insights for %s with model=%s", target.id, self.model)
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(target, result)},
            ],
            response_format={"type": "json_object"},
            temperature=self.temperature,
        )
        content = response.choices[0].message.content or "{}"
        payload = json.loads(content)
        if not isinstance(payload, dict):
            raise ValueError("AI insights response is not a JSON object")
        return parse_insights(payload)
