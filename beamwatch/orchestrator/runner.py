"""Discovery orchestrator: runs the competitor pipeline for one website."""

from __future__ import annotations

import asyncio
import time as time_mod
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import SQLAlchemyError

from beamwatch.agents.research import build_research_agents, run_research_agents
from beamwatch.agents.supervisor import SupervisorValidator
from beamwatch.agents.threat import ThreatScorer
from beamwatch.context import resolve_business_context
from beamwatch.errors import DiscoveryInProgressError, PersistenceError, WebsiteNotFoundError
from beamwatch.metrics import discovery_duration_seconds, discovery_runs_total
from beamwatch.models.discovery import DiscoveryOutcome, DiscoveryStatus
from beamwatch.notifications import notify_discovery_complete, notify_error
from beamwatch.research import merge_candidates

if TYPE_CHECKING:
    from beamwatch.config import Settings
    from beamwatch.db import Database
    from beamwatch.models.competitor import ScoredCompetitor
    from beamwatch.models.discovery import DiscoveryJob
    from beamwatch.protocols import ReasoningService, SearchProvider

logger = structlog.get_logger()


def ensure_not_running(db: Database, website_id: int, stale_minutes: int) -> None:
    """Raise if the latest job for *website_id* is unfinished and recent.

    An unfinished job older than *stale_minutes* is treated as abandoned.
    """
    latest = db.latest_discovery_job(website_id)
    if latest is None or latest.id is None or latest.status.is_terminal:
        return
    if datetime.now(UTC) - latest.created_at > timedelta(minutes=stale_minutes):
        logger.warning(
            "Ignoring stale unfinished discovery job",
            website_id=website_id,
            job_id=latest.id,
            status=latest.status.value,
        )
        return
    raise DiscoveryInProgressError(website_id, latest.id)


class DiscoveryRunner:
    """Sequences context → agents → merge → validation → scoring → persistence.

    Job lifecycle: PENDING → IN_PROGRESS → COMPLETED | FAILED. Search and
    reasoning failures degrade inside the stages; only context resolution and
    persistence failures mark the job FAILED, and those are re-raised.
    """

    def __init__(
        self,
        db: Database,
        settings: Settings,
        search_provider: SearchProvider | None = None,
        reasoning: ReasoningService | None = None,
    ) -> None:
        self.db = db
        self.settings = settings

        if search_provider is None:
            from beamwatch.clients.tavily import TavilyClient

            search_provider = TavilyClient(
                api_key=settings.tavily_api_key, timeout=settings.search_timeout_s
            )
        if reasoning is None:
            from beamwatch.llm import LLMClient

            reasoning = LLMClient(settings)

        self.agents = build_research_agents(
            search_provider,
            max_results=settings.search_max_results,
            timeout=settings.search_timeout_s,
        )
        self.validator = SupervisorValidator(reasoning)
        self.scorer = ThreatScorer(reasoning)

    def get_discovery_status(self, website_id: int) -> DiscoveryJob | None:
        """Latest discovery job for the website, if any."""
        return self.db.latest_discovery_job(website_id)

    async def run_discovery(self, website_id: int) -> DiscoveryOutcome:
        """Run one discovery for *website_id* and persist its competitors.

        Raises:
            DiscoveryInProgressError: A recent job for this website is unfinished.
            WebsiteNotFoundError: No such website, or it is soft-deleted (job
                marked FAILED in the latter case).
            PersistenceError: A store write failed (job marked FAILED when possible).
        """
        correlation_id = uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            website_id=website_id,
        )
        try:
            # A job row needs an existing website; soft-deleted ones still get a FAILED job
            if self.db.get_website(website_id, include_deleted=True) is None:
                raise WebsiteNotFoundError(website_id)
            stale_minutes = self.settings.discovery_stale_minutes
            ensure_not_running(self.db, website_id, stale_minutes)
            try:
                job = self.db.claim_discovery_job(
                    website_id,
                    stale_before=datetime.now(UTC) - timedelta(minutes=stale_minutes),
                    worker_id=self.settings.worker_id,
                )
            except SQLAlchemyError as exc:
                raise PersistenceError(str(exc)) from exc
            if job is None:
                # Another caller claimed the website between the check and the insert
                holder = self.db.latest_discovery_job(website_id)
                assert holder is not None and holder.id is not None
                raise DiscoveryInProgressError(website_id, holder.id)
            assert job.id is not None
            structlog.contextvars.bind_contextvars(job_id=job.id)
            return await self._execute(job.id, website_id)
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id", "website_id", "job_id")

    async def _execute(self, job_id: int, website_id: int) -> DiscoveryOutcome:
        t0 = time_mod.monotonic()
        logger.info("Starting competitor discovery")
        try:
            self._set_status(job_id, DiscoveryStatus.IN_PROGRESS)

            context = resolve_business_context(self.db, website_id)

            candidate_lists = await run_research_agents(self.agents, context)
            candidates = merge_candidates(*candidate_lists)
            logger.info(
                "Combined agent results",
                per_agent=[len(c) for c in candidate_lists],
                unique=len(candidates),
            )

            validated = await self.validator.validate(context, candidates)
            scored = await self.scorer.score_all(validated, context)

            self._persist(website_id, scored)
            self._set_status(job_id, DiscoveryStatus.COMPLETED, competitors_found=len(scored))
        except Exception as exc:
            error_message = str(exc) or type(exc).__name__
            discovery_runs_total.labels(status="failed").inc()
            logger.error("Competitor discovery failed", error=error_message)
            self._mark_failed(job_id, error_message)
            notify_error(website_id, "discovery", error_message)
            raise

        discovery_runs_total.labels(status="completed").inc()
        discovery_duration_seconds.observe(time_mod.monotonic() - t0)
        logger.info("Discovery completed", competitors_found=len(scored))
        notify_discovery_complete(website_id, len(scored))
        return DiscoveryOutcome(
            job_id=job_id,
            website_id=website_id,
            candidates_found=len(candidates),
            competitors=scored,
        )

    def run_discovery_sync(self, website_id: int) -> DiscoveryOutcome:
        """Blocking entry point for the CLI and huey workers."""
        return asyncio.run(self.run_discovery(website_id))

    def _persist(self, website_id: int, scored: list[ScoredCompetitor]) -> None:
        for competitor in scored:
            try:
                self.db.upsert_competitor(website_id, competitor)
            except SQLAlchemyError as exc:
                raise PersistenceError(str(exc)) from exc

    def _set_status(
        self, job_id: int, status: DiscoveryStatus, competitors_found: int | None = None
    ) -> None:
        try:
            self.db.update_discovery_job(job_id, status, competitors_found=competitors_found)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    def _mark_failed(self, job_id: int, error_message: str) -> None:
        try:
            self.db.update_discovery_job(
                job_id, DiscoveryStatus.FAILED, error_message=error_message
            )
        except SQLAlchemyError as exc:
            logger.error("Could not record discovery failure", job_id=job_id, error=str(exc))
