"""Threat scorer: per-competitor LLM breakdown into a 0-100 composite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from beamwatch.errors import ProviderError
from beamwatch.metrics import reasoning_parse_failures_total
from beamwatch.models.base import clamp
from beamwatch.models.competitor import ScoredCompetitor, ThreatBreakdown, ThreatLevel
from beamwatch.parsing import ParseFailure, parse_json_payload

if TYPE_CHECKING:
    from beamwatch.models.business import BusinessContext
    from beamwatch.models.competitor import ValidatedCompetitor
    from beamwatch.protocols import ReasoningService

logger = structlog.get_logger()

SUB_SCORE_MAX = 25
THREAT_SYSTEM = "You are a competitive analyst. Return only valid JSON."


class _ThreatResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    company_size_score: float | None = None
    growth_rate_score: float | None = None
    feature_parity_score: float | None = None
    market_presence_score: float | None = None
    total_threat_score: float | None = None
    threat_level: str | None = None
    reasoning: str = ""


def build_threat_prompt(competitor: ValidatedCompetitor, context: BusinessContext) -> str:
    return f"""Analyze this competitor and rate their threat level to {context.business_name}.

Competitor: {competitor.name}
URL: {competitor.url}

Business Type: {context.business_type}
Location: {context.location}

Rate on scale 0-100:
1. Company Size (0-25): How large is this company?
2. Growth Rate (0-25): How fast are they growing?
3. Feature Parity (0-25): How similar are their offerings?
4. Market Presence (0-25): How strong is their market position?

Return JSON:
{{
  "company_size_score": 0,
  "growth_rate_score": 0,
  "feature_parity_score": 0,
  "market_presence_score": 0,
  "total_threat_score": 0,
  "threat_level": "CRITICAL|HIGH|MEDIUM|LOW",
  "reasoning": "..."
}}
"""


def breakdown_from_response(response: _ThreatResponse) -> ThreatBreakdown:
    """Clamp sub-scores to [0, 25] and derive the composite and level.

    The composite is the sum of the reported sub-scores; the provider's own total
    is used only when no sub-score was reported. A missing or unknown level is
    derived from the composite.
    """
    subs = [
        response.company_size_score,
        response.growth_rate_score,
        response.feature_parity_score,
        response.market_presence_score,
    ]
    clamped = [round(clamp(s or 0.0, 0, SUB_SCORE_MAX)) for s in subs]

    if any(s is not None for s in subs):
        total = sum(clamped)
    elif response.total_threat_score is not None:
        total = round(response.total_threat_score)
    else:
        return ThreatBreakdown.neutral()
    total = int(clamp(total, 0, 100))

    try:
        level = ThreatLevel((response.threat_level or "").strip().upper())
    except ValueError:
        level = ThreatLevel.from_score(total)

    return ThreatBreakdown(
        company_size_score=clamped[0],
        growth_rate_score=clamped[1],
        feature_parity_score=clamped[2],
        market_presence_score=clamped[3],
        threat_score=total,
        threat_level=level,
        reasoning=response.reasoning,
    )


class ThreatScorer:
    """Scores validated competitors one request at a time.

    A competitor whose scoring fails is kept with the neutral default
    (score 50, MEDIUM).
    """

    def __init__(self, reasoning: ReasoningService) -> None:
        self.reasoning = reasoning

    async def score(
        self, competitor: ValidatedCompetitor, context: BusinessContext
    ) -> ScoredCompetitor:
        breakdown = await self._breakdown(competitor, context)
        return ScoredCompetitor(**competitor.model_dump(), threat=breakdown)

    async def score_all(
        self, competitors: list[ValidatedCompetitor], context: BusinessContext
    ) -> list[ScoredCompetitor]:
        scored: list[ScoredCompetitor] = []
        for competitor in competitors:
            scored.append(await self.score(competitor, context))
        return scored

    async def _breakdown(
        self, competitor: ValidatedCompetitor, context: BusinessContext
    ) -> ThreatBreakdown:
        try:
            text = await self.reasoning.complete(
                build_threat_prompt(competitor, context), system=THREAT_SYSTEM
            )
        except ProviderError as exc:
            logger.warning("Threat scoring request failed", url=competitor.url, error=str(exc))
            return ThreatBreakdown.neutral()

        parsed = parse_json_payload(text, _ThreatResponse)
        if isinstance(parsed, ParseFailure):
            reasoning_parse_failures_total.labels(stage="threat").inc()
            logger.warning(
                "Could not parse threat response", url=competitor.url, reason=parsed.reason
            )
            return ThreatBreakdown.neutral()

        breakdown = breakdown_from_response(parsed.value)
        logger.info(
            "Competitor scored",
            url=competitor.url,
            threat_score=breakdown.threat_score,
            threat_level=breakdown.threat_level.value,
        )
        return breakdown
