"""Database package: engine, ORM models, and CRUD facade."""

from beamwatch.db.engine import create_db_engine, create_session_factory
from beamwatch.db.facade import BusinessTypeDict, Database, KeywordDict, SubscriptionDict
from beamwatch.db.orm import (
    Base,
    BusinessTypeRow,
    CompetitorRow,
    DiscoveryJobRow,
    KeywordRow,
    MonthlyReportRow,
    SubscriptionRow,
    ThreatAssessmentRow,
    UserRow,
    WebsiteRow,
)

__all__ = [
    "Base",
    "BusinessTypeDict",
    "BusinessTypeRow",
    "CompetitorRow",
    "Database",
    "DiscoveryJobRow",
    "KeywordDict",
    "KeywordRow",
    "MonthlyReportRow",
    "SubscriptionDict",
    "SubscriptionRow",
    "ThreatAssessmentRow",
    "UserRow",
    "WebsiteRow",
    "create_db_engine",
    "create_session_factory",
]
