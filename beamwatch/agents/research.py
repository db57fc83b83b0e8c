"""Research agents: concurrent web searches seeded from one business context."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from beamwatch.metrics import agent_searches_total
from beamwatch.models.competitor import Candidate

if TYPE_CHECKING:
    from beamwatch.models.business import BusinessContext
    from beamwatch.protocols import SearchProvider

logger = structlog.get_logger()

MAX_CANDIDATES_PER_AGENT = 5

QUERY_TEMPLATES: tuple[str, ...] = (
    "{business_type} competitors {location}",
    "best {business_type} in {location}",
    "{business_type} alternatives to {business_name}",
)


class ResearchAgent:
    """One search formulation against the search provider.

    A failed or timed-out search yields an empty list; it never aborts the run.
    """

    def __init__(
        self,
        agent_id: int,
        template: str,
        provider: SearchProvider,
        *,
        max_results: int = 10,
        timeout: float = 20.0,
    ) -> None:
        self.agent_id = agent_id
        self.template = template
        self.provider = provider
        self.max_results = max_results
        self.timeout = timeout

    def build_query(self, context: BusinessContext) -> str:
        return self.template.format(
            business_type=context.business_type,
            location=context.location,
            business_name=context.business_name,
        ).strip()

    async def search(self, context: BusinessContext) -> list[Candidate]:
        query = self.build_query(context)
        logger.info("Research agent searching", agent_id=self.agent_id, query=query)
        try:
            results = await asyncio.wait_for(
                self.provider.search(query, max_results=self.max_results),
                timeout=self.timeout,
            )
        except Exception as exc:
            agent_searches_total.labels(agent_id=str(self.agent_id), outcome="error").inc()
            logger.warning(
                "Research agent search failed",
                agent_id=self.agent_id,
                query=query,
                error=str(exc) or type(exc).__name__,
            )
            return []

        candidates = [
            Candidate(
                name=r["title"],
                url=r["url"],
                description=r.get("content", ""),
                agent_id=self.agent_id,
            )
            for r in results
            if r.get("title") and r.get("url")
        ][:MAX_CANDIDATES_PER_AGENT]

        agent_searches_total.labels(agent_id=str(self.agent_id), outcome="success").inc()
        logger.info("Research agent done", agent_id=self.agent_id, candidates=len(candidates))
        return candidates


def build_research_agents(
    provider: SearchProvider, *, max_results: int = 10, timeout: float = 20.0
) -> list[ResearchAgent]:
    """One agent per query template, numbered from 1."""
    return [
        ResearchAgent(i, template, provider, max_results=max_results, timeout=timeout)
        for i, template in enumerate(QUERY_TEMPLATES, start=1)
    ]


async def run_research_agents(
    agents: list[ResearchAgent], context: BusinessContext
) -> list[list[Candidate]]:
    """Run all agents concurrently; results keep agent order."""
    results = await asyncio.gather(*(agent.search(context) for agent in agents))
    return list(results)
