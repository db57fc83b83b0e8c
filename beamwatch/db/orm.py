"""SQLAlchemy ORM models mapping to the beamwatch database tables."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow_str() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    owner_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)


class BusinessTypeRow(Base):
    __tablename__ = "business_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    keywords_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    typical_competitors_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")


class WebsiteRow(Base):
    __tablename__ = "websites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    business_type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(Text, nullable=False, default="")
    website_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(Text, nullable=False, default="active")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        CheckConstraint("status IN ('active', 'paused')", name="ck_websites_status"),
        Index("idx_websites_status", "status", "deleted_at"),
    )


class KeywordRow(Base):
    __tablename__ = "keywords"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    website_id: Mapped[int] = mapped_column(Integer, ForeignKey("websites.id"), nullable=False)
    keyword: Mapped[str] = mapped_column(Text, nullable=False)
    relevance_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (Index("idx_keywords_website", "website_id"),)


class CompetitorRow(Base):
    __tablename__ = "competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    website_id: Mapped[int] = mapped_column(Integer, ForeignKey("websites.id"), nullable=False)
    competitor_name: Mapped[str] = mapped_column(Text, nullable=False)
    competitor_url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    threat_level: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    threat_score: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    discovery_method: Mapped[str] = mapped_column(Text, nullable=False, default="")
    discovered_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        UniqueConstraint("website_id", "competitor_url", name="uq_competitors_website_url"),
        CheckConstraint(
            "threat_level IS NULL OR threat_level IN ('CRITICAL', 'HIGH', 'MEDIUM', 'LOW')",
            name="ck_competitors_threat_level",
        ),
        Index("idx_competitors_website", "website_id"),
    )


class DiscoveryJobRow(Base):
    __tablename__ = "discovery_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    website_id: Mapped[int] = mapped_column(Integer, ForeignKey("websites.id"), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")
    discovery_method: Mapped[str] = mapped_column(Text, nullable=False, default="")
    competitors_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    worker_id: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    started_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    completed_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'failed')",
            name="ck_discovery_jobs_status",
        ),
        Index("idx_discovery_jobs_website", "website_id", "id"),
        Index(
            "uq_discovery_jobs_active_website",
            "website_id",
            unique=True,
            sqlite_where=text("status IN ('pending', 'in_progress')"),
        ),
    )


class ThreatAssessmentRow(Base):
    __tablename__ = "threat_assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    website_id: Mapped[int] = mapped_column(Integer, ForeignKey("websites.id"), nullable=False)
    threat_level: Mapped[str] = mapped_column(Text, nullable=False)
    threat_score: Mapped[int] = mapped_column(Integer, nullable=False)
    competitor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_competitor_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    market_saturation: Mapped[str] = mapped_column(Text, nullable=False, default="very_low")
    ai_search_visibility: Mapped[str] = mapped_column(Text, nullable=False, default="very_low")
    assessed_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (Index("idx_threat_assessments_website", "website_id", "assessed_at"),)


class MonthlyReportRow(Base):
    __tablename__ = "monthly_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    website_id: Mapped[int] = mapped_column(Integer, ForeignKey("websites.id"), nullable=False)
    report_month: Mapped[str] = mapped_column(Text, nullable=False)
    threat_level: Mapped[str] = mapped_column(Text, nullable=False)
    threat_score: Mapped[int] = mapped_column(Integer, nullable=False)
    competitor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_competitors_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    top_keywords_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    recommendations_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    generated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    email_status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")
    email_sent_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        UniqueConstraint("website_id", "report_month", name="uq_monthly_reports_website_month"),
        CheckConstraint(
            "email_status IN ('pending', 'sent', 'failed')",
            name="ck_monthly_reports_email_status",
        ),
    )


class SubscriptionRow(Base):
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="incomplete")
    renewal_date: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (Index("idx_subscriptions_status", "status", "renewal_date"),)
