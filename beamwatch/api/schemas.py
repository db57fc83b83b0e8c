"""API request/response schemas (separate from domain models)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from beamwatch.models.threat import RankedCompetitor, ThreatSummary, TrendPoint

# --- Responses ---


class DiscoveryJobResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    website_id: int
    status: str
    discovery_method: str
    competitors_found: int
    error_message: str | None
    created_at: str
    started_at: str | None
    completed_at: str | None


class CompetitorRankingResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    website_id: int
    competitors: list[RankedCompetitor]
    total: int


class ThreatResponse(BaseModel):
    """Current threat view. ``summary`` is None until the first assessment."""

    model_config = ConfigDict(frozen=True)

    website_id: int
    summary: ThreatSummary | None


class TrendResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    website_id: int
    months: int
    points: list[TrendPoint]


class DistributionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    website_id: int
    distribution: dict[str, int]


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    db_connected: bool


class ConfigCheckResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    configured: dict[str, bool]


class ActionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    task_id: str | None = None
