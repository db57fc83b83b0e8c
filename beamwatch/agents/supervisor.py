"""Supervisor agent: LLM validation and ranking of merged candidates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from beamwatch.errors import ProviderError
from beamwatch.metrics import reasoning_parse_failures_total
from beamwatch.models.base import clamp
from beamwatch.models.competitor import ValidatedCompetitor
from beamwatch.parsing import ParseFailure, parse_json_payload
from beamwatch.research import format_candidates

if TYPE_CHECKING:
    from collections.abc import Iterable

    from beamwatch.models.business import BusinessContext
    from beamwatch.models.competitor import Candidate
    from beamwatch.protocols import ReasoningService

logger = structlog.get_logger()

CONFIDENCE_THRESHOLD = 80
MAX_VALIDATED = 5

SUPERVISOR_SYSTEM = "You are a business analyst. Return only valid JSON."


class _Judgment(BaseModel):
    """One candidate as judged by the reasoning service."""

    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    name: str = ""
    url: str
    is_competitor: bool = False
    business_model_match: float = 0.0
    geographic_relevance: float = 0.0
    market_relevance: float = 0.0
    confidence: float = 0.0
    reasoning: str = ""

    @field_validator(
        "business_model_match",
        "geographic_relevance",
        "market_relevance",
        "confidence",
    )
    @classmethod
    def _clamp_percent(cls, v: float) -> float:
        return clamp(v, 0.0, 100.0)


class _SupervisorResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    validated_competitors: list[_Judgment] = Field(default_factory=list)


def select_validated(judgments: Iterable[ValidatedCompetitor]) -> list[ValidatedCompetitor]:
    """Keep confirmed competitors with confidence >= 80, best first, at most 5.

    A URL confirmed more than once keeps only its most confident judgment.
    """
    best: dict[str, ValidatedCompetitor] = {}
    for j in judgments:
        if not j.is_competitor or j.confidence < CONFIDENCE_THRESHOLD:
            continue
        if j.url not in best or j.confidence > best[j.url].confidence:
            best[j.url] = j
    kept = list(best.values())
    kept.sort(key=lambda j: j.confidence, reverse=True)
    return kept[:MAX_VALIDATED]


def build_supervisor_prompt(context: BusinessContext, candidates: list[Candidate]) -> str:
    keywords = ", ".join(context.keywords) or "(none)"
    hints = ", ".join(context.typical_competitors) or "(none)"
    return f"""You are a business analyst validating competitor information.

Business Context:
- Name: {context.business_name}
- Type: {context.business_type}
- Location: {context.location}
- Keywords: {keywords}
- Typical competitors: {hints}

Candidates to validate (from 3 research agents):
{format_candidates(candidates)}

For each candidate, determine:
1. Is this a real competitor? (true/false)
2. Business model match (0-100)
3. Geographic relevance (0-100)
4. Market relevance (0-100)
5. Overall confidence (0-100)

Return JSON with:
{{
  "validated_competitors": [
    {{
      "name": "...",
      "url": "...",
      "is_competitor": true,
      "business_model_match": 0,
      "geographic_relevance": 0,
      "market_relevance": 0,
      "confidence": 0,
      "reasoning": "..."
    }}
  ]
}}
"""


class SupervisorValidator:
    """Sends merged candidates to the reasoning service and keeps the top matches.

    Provider and parse failures return an empty list.
    """

    def __init__(self, reasoning: ReasoningService) -> None:
        self.reasoning = reasoning

    async def validate(
        self, context: BusinessContext, candidates: list[Candidate]
    ) -> list[ValidatedCompetitor]:
        if not candidates:
            logger.info("No candidates to validate")
            return []

        prompt = build_supervisor_prompt(context, candidates)
        try:
            text = await self.reasoning.complete(prompt, system=SUPERVISOR_SYSTEM)
        except ProviderError as exc:
            logger.warning("Supervisor request failed", error=str(exc))
            return []

        parsed = parse_json_payload(text, _SupervisorResponse)
        if isinstance(parsed, ParseFailure):
            reasoning_parse_failures_total.labels(stage="supervisor").inc()
            logger.warning("Could not parse supervisor response", reason=parsed.reason)
            return []

        by_url = {c.url: c for c in candidates}
        judged = [
            self._to_validated(j, by_url.get(j.url)) for j in parsed.value.validated_competitors
        ]
        validated = select_validated(judged)
        logger.info(
            "Supervisor validated competitors",
            judged=len(judged),
            validated=len(validated),
        )
        return validated

    @staticmethod
    def _to_validated(judgment: _Judgment, candidate: Candidate | None) -> ValidatedCompetitor:
        return ValidatedCompetitor(
            name=judgment.name or (candidate.name if candidate else judgment.url),
            url=judgment.url,
            description=candidate.description if candidate else "",
            agent_id=candidate.agent_id if candidate else 0,
            is_competitor=judgment.is_competitor,
            business_model_match=round(judgment.business_model_match),
            geographic_relevance=round(judgment.geographic_relevance),
            market_relevance=round(judgment.market_relevance),
            confidence=judgment.confidence,
            reasoning=judgment.reasoning,
        )
