"""Per-website endpoints: discovery trigger and status, competitors, threat views."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query

from beamwatch.api.deps import DbDep, SettingsDep
from beamwatch.api.schemas import (
    ActionResponse,
    CompetitorRankingResponse,
    DiscoveryJobResponse,
    DistributionResponse,
    ThreatResponse,
    TrendResponse,
)
from beamwatch.errors import WebsiteNotFoundError
from beamwatch.insights import (
    rank_competitors,
    summarize_threat,
    threat_distribution,
    threat_trend,
)
from beamwatch.orchestrator.runner import ensure_not_running

if TYPE_CHECKING:
    from beamwatch.db import Database
    from beamwatch.models.discovery import DiscoveryJob

router = APIRouter(prefix="/websites", tags=["websites"])


def _require_website(db: Database, website_id: int) -> None:
    if db.get_website(website_id) is None:
        raise WebsiteNotFoundError(website_id)


def _job_to_response(job: DiscoveryJob) -> DiscoveryJobResponse:
    return DiscoveryJobResponse(
        id=job.id or 0,
        website_id=job.website_id,
        status=job.status.value,
        discovery_method=job.discovery_method,
        competitors_found=job.competitors_found,
        error_message=job.error_message,
        created_at=job.created_at.isoformat(),
        started_at=job.started_at.isoformat() if job.started_at else None,
        completed_at=job.completed_at.isoformat() if job.completed_at else None,
    )


@router.post("/{website_id}/discovery", response_model=ActionResponse, status_code=202)
def trigger_discovery(
    website_id: int,
    db: DbDep,
    settings: SettingsDep,
) -> ActionResponse:
    _require_website(db, website_id)
    ensure_not_running(db, website_id, settings.discovery_stale_minutes)

    from beamwatch.tasks import discover_competitors_task

    result = discover_competitors_task(website_id)
    task_id = result.id if hasattr(result, "id") else None
    return ActionResponse(
        message=f"Competitor discovery enqueued for website {website_id}",
        task_id=str(task_id) if task_id else None,
    )


@router.get("/{website_id}/discovery", response_model=DiscoveryJobResponse | None)
def get_discovery_status(
    website_id: int,
    db: DbDep,
) -> DiscoveryJobResponse | None:
    _require_website(db, website_id)
    job = db.latest_discovery_job(website_id)
    return _job_to_response(job) if job else None


@router.get("/{website_id}/competitors", response_model=CompetitorRankingResponse)
def get_competitor_ranking(
    website_id: int,
    db: DbDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> CompetitorRankingResponse:
    _require_website(db, website_id)
    ranked = rank_competitors(db, website_id, limit=limit)
    return CompetitorRankingResponse(website_id=website_id, competitors=ranked, total=len(ranked))


@router.get("/{website_id}/threat", response_model=ThreatResponse)
def get_current_threat(
    website_id: int,
    db: DbDep,
) -> ThreatResponse:
    _require_website(db, website_id)
    assessment = db.latest_threat_assessment(website_id)
    return ThreatResponse(
        website_id=website_id,
        summary=summarize_threat(assessment) if assessment else None,
    )


@router.get("/{website_id}/threat/trend", response_model=TrendResponse)
def get_threat_trend(
    website_id: int,
    db: DbDep,
    months: int = Query(default=12, ge=1, le=60),
) -> TrendResponse:
    _require_website(db, website_id)
    return TrendResponse(
        website_id=website_id,
        months=months,
        points=threat_trend(db, website_id, months=months),
    )


@router.get("/{website_id}/threat/distribution", response_model=DistributionResponse)
def get_threat_distribution(
    website_id: int,
    db: DbDep,
) -> DistributionResponse:
    _require_website(db, website_id)
    counts = threat_distribution(db, website_id)
    return DistributionResponse(
        website_id=website_id,
        distribution={level.value: n for level, n in counts.items()},
    )
