"""Competitor models, from raw search candidates to persisted rows."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from beamwatch.models.base import utcnow


class ThreatLevel(StrEnum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def from_score(cls, score: int) -> ThreatLevel:
        """Map a 0-100 composite score to a level."""
        if score >= 80:
            return cls.CRITICAL
        if score >= 60:
            return cls.HIGH
        if score >= 40:
            return cls.MEDIUM
        return cls.LOW


class Candidate(BaseModel):
    """An unvalidated search hit that might be a competitor. URL is the identity."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    description: str = ""
    agent_id: int = 0


class ValidatedCompetitor(Candidate):
    """A candidate the supervisor judged to be a real competitor."""

    is_competitor: bool = False
    business_model_match: int = Field(default=0, ge=0, le=100)
    geographic_relevance: int = Field(default=0, ge=0, le=100)
    market_relevance: int = Field(default=0, ge=0, le=100)
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    reasoning: str = ""


class ThreatBreakdown(BaseModel):
    """Weighted threat sub-scores for one competitor."""

    model_config = ConfigDict(frozen=True)

    company_size_score: int = Field(default=0, ge=0, le=25)
    growth_rate_score: int = Field(default=0, ge=0, le=25)
    feature_parity_score: int = Field(default=0, ge=0, le=25)
    market_presence_score: int = Field(default=0, ge=0, le=25)
    threat_score: int = Field(default=50, ge=0, le=100)
    threat_level: ThreatLevel = ThreatLevel.MEDIUM
    reasoning: str = ""
    is_default: bool = False

    @classmethod
    def neutral(cls) -> ThreatBreakdown:
        """Conservative estimate recorded when scoring fails."""
        return cls(threat_score=50, threat_level=ThreatLevel.MEDIUM, is_default=True)


class ScoredCompetitor(ValidatedCompetitor):
    """A validated competitor with its threat breakdown attached."""

    threat: ThreatBreakdown = Field(default_factory=ThreatBreakdown.neutral)

    @property
    def threat_score(self) -> int:
        return self.threat.threat_score

    @property
    def threat_level(self) -> ThreatLevel:
        return self.threat.threat_level


class Competitor(BaseModel):
    """Persisted competitor row owned by a website."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    website_id: int
    competitor_name: str
    competitor_url: str
    description: str = ""
    threat_level: ThreatLevel | None = None
    threat_score: int | None = None
    confidence: float | None = None
    discovery_method: str = ""
    discovered_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None
