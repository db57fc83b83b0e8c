"""Re-exports all Pydantic models."""

from beamwatch.models.automation import BatchResult, JobStatus
from beamwatch.models.business import BusinessContext, Website, WebsiteStatus
from beamwatch.models.competitor import (
    Candidate,
    Competitor,
    ScoredCompetitor,
    ThreatBreakdown,
    ThreatLevel,
    ValidatedCompetitor,
)
from beamwatch.models.discovery import (
    DISCOVERY_METHOD,
    DiscoveryJob,
    DiscoveryOutcome,
    DiscoveryStatus,
)
from beamwatch.models.report import (
    EmailStatus,
    MonthlyReport,
    ReportCompetitor,
    ReportKeyword,
    ReportRecommendation,
)
from beamwatch.models.threat import (
    Bucket,
    RankedCompetitor,
    Recommendation,
    ThreatAssessment,
    ThreatSummary,
    TrendPoint,
)

__all__ = [
    "DISCOVERY_METHOD",
    "BatchResult",
    "Bucket",
    "BusinessContext",
    "Candidate",
    "Competitor",
    "DiscoveryJob",
    "DiscoveryOutcome",
    "DiscoveryStatus",
    "EmailStatus",
    "JobStatus",
    "MonthlyReport",
    "RankedCompetitor",
    "Recommendation",
    "ReportCompetitor",
    "ReportKeyword",
    "ReportRecommendation",
    "ScoredCompetitor",
    "ThreatAssessment",
    "ThreatBreakdown",
    "ThreatLevel",
    "ThreatSummary",
    "TrendPoint",
    "ValidatedCompetitor",
    "Website",
    "WebsiteStatus",
]
