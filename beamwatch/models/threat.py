"""Aggregate threat assessment models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from beamwatch.models.base import utcnow
from beamwatch.models.competitor import ThreatLevel


class Bucket(StrEnum):
    """Discrete five-step scale used for market saturation and AI search visibility."""

    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class ThreatAssessment(BaseModel):
    """Point-in-time aggregate snapshot for a website. Appended, never updated."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    website_id: int | None = None
    threat_level: ThreatLevel
    threat_score: int = Field(ge=0, le=100)
    competitor_count: int = Field(default=0, ge=0)
    average_competitor_score: int = 0
    market_saturation: Bucket = Bucket.VERY_LOW
    ai_search_visibility: Bucket = Bucket.VERY_LOW
    assessed_at: datetime = Field(default_factory=utcnow)


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: ThreatLevel
    title: str
    description: str
    category: str


class ThreatSummary(BaseModel):
    """Assessment enriched with presentation hints and recommendations."""

    model_config = ConfigDict(frozen=True)

    assessment: ThreatAssessment
    color: str
    description: str
    recommendations: list[Recommendation] = Field(default_factory=list)


class RankedCompetitor(BaseModel):
    model_config = ConfigDict(frozen=True)

    rank: int
    competitor_id: int
    competitor_name: str
    competitor_url: str
    threat_level: ThreatLevel | None = None
    threat_score: int | None = None
    confidence: float | None = None
    discovered_at: datetime


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    threat_level: ThreatLevel
    threat_score: int
    competitor_count: int
    average_competitor_score: int
