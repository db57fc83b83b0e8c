"""Monthly report models."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from beamwatch.models.base import utcnow
from beamwatch.models.competitor import ThreatLevel


class EmailStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class ReportCompetitor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    threat_level: ThreatLevel | None = None
    threat_score: int | None = None


class ReportKeyword(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    relevance_score: float = 0.0


class ReportRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    priority: str


class MonthlyReport(BaseModel):
    """Compiled monthly report for one website. Upserted per (website, month)."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    website_id: int
    report_month: date
    threat_level: ThreatLevel = ThreatLevel.MEDIUM
    threat_score: int = 50
    competitor_count: int = 0
    top_competitors: list[ReportCompetitor] = Field(default_factory=list)
    top_keywords: list[ReportKeyword] = Field(default_factory=list)
    recommendations: list[ReportRecommendation] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utcnow)
    email_status: EmailStatus = EmailStatus.PENDING
    email_sent_at: datetime | None = None
