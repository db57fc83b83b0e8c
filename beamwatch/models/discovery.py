"""Discovery job model: one tracked execution of the pipeline for one website."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from beamwatch.models.base import utcnow
from beamwatch.models.competitor import ScoredCompetitor

DISCOVERY_METHOD = "v4_multi_agent"


class DiscoveryStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DiscoveryStatus.COMPLETED, DiscoveryStatus.FAILED)


class DiscoveryJob(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None = None
    website_id: int
    status: DiscoveryStatus = DiscoveryStatus.PENDING
    discovery_method: str = DISCOVERY_METHOD
    competitors_found: int = 0
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None


class DiscoveryOutcome(BaseModel):
    """Result handed back to the caller of a successful discovery run."""

    model_config = ConfigDict(frozen=True)

    job_id: int
    website_id: int
    candidates_found: int = 0
    competitors: list[ScoredCompetitor] = Field(default_factory=list)

    @property
    def competitors_found(self) -> int:
        return len(self.competitors)
