"""SQLAlchemy-backed database connection and CRUD helpers."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import IntegrityError

from beamwatch.db.engine import create_db_engine, create_session_factory
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
from beamwatch.models.business import Website, WebsiteStatus
from beamwatch.models.competitor import Competitor, ScoredCompetitor, ThreatLevel
from beamwatch.models.discovery import DISCOVERY_METHOD, DiscoveryJob, DiscoveryStatus
from beamwatch.models.report import (
    EmailStatus,
    MonthlyReport,
    ReportCompetitor,
    ReportKeyword,
    ReportRecommendation,
)
from beamwatch.models.threat import Bucket, ThreatAssessment

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session, sessionmaker


class BusinessTypeDict(TypedDict):
    type_name: str
    keywords: list[str]
    typical_competitors: list[str]


class KeywordDict(TypedDict):
    keyword: str
    relevance_score: float


class SubscriptionDict(TypedDict):
    id: int
    user_id: int
    renewal_date: datetime
    email: str
    owner_name: str


class Database:
    """SQLAlchemy-backed wrapper with CRUD helpers for websites, competitors and jobs."""

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        self._engine: Engine = create_db_engine(self.db_path)
        self._session_factory: sessionmaker[Session] = create_session_factory(self._engine)

    @property
    def engine(self) -> Engine:
        """Expose the SQLAlchemy engine for inspection and advanced use."""
        return self._engine

    @property
    def Session(self) -> sessionmaker[Session]:  # noqa: N802
        """Expose the session factory for consumers that need direct access."""
        return self._session_factory

    def init_schema(self) -> None:
        """Create all tables via ORM metadata."""
        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    def check_connection(self) -> bool:
        """Verify the database is reachable. Returns True or raises."""
        with self._session_factory() as session:
            session.execute(text("SELECT 1"))
        return True

    # --- Users & taxonomy ---

    def create_user(self, email: str, owner_name: str = "") -> int:
        with self._session_factory() as session:
            row = UserRow(email=email, owner_name=owner_name)
            session.add(row)
            session.commit()
            return row.id

    def upsert_business_type(
        self,
        type_name: str,
        keywords: list[str] | None = None,
        typical_competitors: list[str] | None = None,
    ) -> None:
        with self._session_factory() as session:
            stmt = select(BusinessTypeRow).where(BusinessTypeRow.type_name == type_name)
            row = session.scalars(stmt).first()
            if row is None:
                row = BusinessTypeRow(type_name=type_name)
                session.add(row)
            row.keywords_json = json.dumps(keywords or [])
            row.typical_competitors_json = json.dumps(typical_competitors or [])
            session.commit()

    def get_business_type(self, type_name: str) -> BusinessTypeDict | None:
        with self._session_factory() as session:
            stmt = select(BusinessTypeRow).where(BusinessTypeRow.type_name == type_name)
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return {
                "type_name": row.type_name,
                "keywords": _load_str_list(row.keywords_json),
                "typical_competitors": _load_str_list(row.typical_competitors_json),
            }

    # --- Websites ---

    def create_website(self, website: Website) -> Website:
        with self._session_factory() as session:
            row = WebsiteRow(
                user_id=website.user_id,
                business_name=website.business_name,
                business_type=website.business_type,
                location=website.location,
                website_url=website.website_url,
                status=website.status.value,
            )
            session.add(row)
            session.commit()
            return self._row_to_website(row)

    def get_website(self, website_id: int, include_deleted: bool = False) -> Website | None:
        with self._session_factory() as session:
            row = session.get(WebsiteRow, website_id)
            if row is None or (row.deleted_at is not None and not include_deleted):
                return None
            return self._row_to_website(row)

    def list_active_websites(self) -> list[Website]:
        """Active, non-deleted websites, least recently refreshed first."""
        with self._session_factory() as session:
            stmt = (
                select(WebsiteRow, UserRow)
                .outerjoin(UserRow, WebsiteRow.user_id == UserRow.id)
                .where(
                    WebsiteRow.deleted_at.is_(None),
                    WebsiteRow.status == WebsiteStatus.ACTIVE.value,
                )
                .order_by(WebsiteRow.updated_at, WebsiteRow.id)
            )
            websites: list[Website] = []
            for row, user in session.execute(stmt).all():
                websites.append(self._row_to_website(row, user))
            return websites

    def touch_website(self, website_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(WebsiteRow, website_id)
            if row is None:
                return
            row.updated_at = _utcnow_str()
            session.commit()

    def soft_delete_website(self, website_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(WebsiteRow, website_id)
            if row is None:
                return
            row.deleted_at = _utcnow_str()
            session.commit()

    # --- Keywords ---

    def add_keyword(self, website_id: int, keyword: str, relevance_score: float = 0.0) -> int:
        with self._session_factory() as session:
            row = KeywordRow(
                website_id=website_id, keyword=keyword, relevance_score=relevance_score
            )
            session.add(row)
            session.commit()
            return row.id

    def count_keywords(self, website_id: int) -> int:
        with self._session_factory() as session:
            stmt = select(func.count(KeywordRow.id)).where(
                KeywordRow.website_id == website_id,
                KeywordRow.deleted_at.is_(None),
            )
            return session.scalar(stmt) or 0

    def top_keywords(self, website_id: int, limit: int = 10) -> list[KeywordDict]:
        with self._session_factory() as session:
            stmt = (
                select(KeywordRow)
                .where(KeywordRow.website_id == website_id, KeywordRow.deleted_at.is_(None))
                .order_by(KeywordRow.relevance_score.desc(), KeywordRow.id)
                .limit(limit)
            )
            return [
                {"keyword": r.keyword, "relevance_score": r.relevance_score}
                for r in session.scalars(stmt).all()
            ]

    # --- Competitors ---

    def upsert_competitor(
        self,
        website_id: int,
        competitor: ScoredCompetitor,
        discovery_method: str = DISCOVERY_METHOD,
    ) -> int:
        """Insert or update the competitor keyed by (website_id, url).

        A soft-deleted row keeps its deletion mark; only its scores are refreshed.
        """
        now = _utcnow_str()
        with self._session_factory() as session:
            stmt = select(CompetitorRow).where(
                CompetitorRow.website_id == website_id,
                CompetitorRow.competitor_url == competitor.url,
            )
            existing = session.scalars(stmt).first()
            if existing:
                existing.competitor_name = competitor.name
                existing.description = competitor.description
                existing.threat_level = competitor.threat_level.value
                existing.threat_score = competitor.threat_score
                existing.confidence = competitor.confidence
                existing.discovery_method = discovery_method
                existing.updated_at = now
                session.commit()
                return existing.id
            row = CompetitorRow(
                website_id=website_id,
                competitor_name=competitor.name,
                competitor_url=competitor.url,
                description=competitor.description,
                threat_level=competitor.threat_level.value,
                threat_score=competitor.threat_score,
                confidence=competitor.confidence,
                discovery_method=discovery_method,
                discovered_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return row.id

    def add_competitor(self, competitor: Competitor) -> Competitor:
        """Insert a competitor row as-is (manual entry and fixtures)."""
        with self._session_factory() as session:
            row = CompetitorRow(
                website_id=competitor.website_id,
                competitor_name=competitor.competitor_name,
                competitor_url=competitor.competitor_url,
                description=competitor.description,
                threat_level=competitor.threat_level.value if competitor.threat_level else None,
                threat_score=competitor.threat_score,
                confidence=competitor.confidence,
                discovery_method=competitor.discovery_method,
            )
            session.add(row)
            session.commit()
            return self._row_to_competitor(row)

    def list_competitors(self, website_id: int, limit: int | None = None) -> list[Competitor]:
        """Non-deleted competitors, strongest threat first."""
        with self._session_factory() as session:
            stmt = (
                select(CompetitorRow)
                .where(
                    CompetitorRow.website_id == website_id,
                    CompetitorRow.deleted_at.is_(None),
                )
                .order_by(CompetitorRow.threat_score.desc().nulls_last(), CompetitorRow.id)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return [self._row_to_competitor(r) for r in session.scalars(stmt).all()]

    def soft_delete_competitor(self, competitor_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(CompetitorRow, competitor_id)
            if row is None:
                return
            row.deleted_at = _utcnow_str()
            session.commit()

    # --- Discovery jobs ---

    def create_discovery_job(
        self, website_id: int, discovery_method: str = DISCOVERY_METHOD, worker_id: str = ""
    ) -> DiscoveryJob:
        with self._session_factory() as session:
            row = DiscoveryJobRow(
                website_id=website_id,
                status=DiscoveryStatus.PENDING.value,
                discovery_method=discovery_method,
                worker_id=worker_id,
            )
            session.add(row)
            session.commit()
            return self._row_to_job(row)

    def claim_discovery_job(
        self,
        website_id: int,
        stale_before: datetime,
        discovery_method: str = DISCOVERY_METHOD,
        worker_id: str = "",
    ) -> DiscoveryJob | None:
        """Create a PENDING job unless another unfinished job holds the website.

        Unfinished jobs created before *stale_before* are failed as abandoned in
        the same transaction. The partial unique index on active jobs makes the
        insert the arbiter, so concurrent callers cannot both succeed. Returns
        None when a recent unfinished job already exists.
        """
        active = (DiscoveryStatus.PENDING.value, DiscoveryStatus.IN_PROGRESS.value)
        with self._session_factory() as session:
            session.execute(
                update(DiscoveryJobRow)
                .where(
                    DiscoveryJobRow.website_id == website_id,
                    DiscoveryJobRow.status.in_(active),
                    DiscoveryJobRow.created_at < _fmt_dt(stale_before),
                )
                .values(
                    status=DiscoveryStatus.FAILED.value,
                    error_message="Abandoned: no progress within the stale window",
                    completed_at=_utcnow_str(),
                )
            )
            row = DiscoveryJobRow(
                website_id=website_id,
                status=DiscoveryStatus.PENDING.value,
                discovery_method=discovery_method,
                worker_id=worker_id,
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                holder = session.scalars(
                    select(DiscoveryJobRow.id).where(
                        DiscoveryJobRow.website_id == website_id,
                        DiscoveryJobRow.status.in_(active),
                    )
                ).first()
                if holder is None:
                    raise
                return None
            return self._row_to_job(row)

    def update_discovery_job(
        self,
        job_id: int,
        status: DiscoveryStatus,
        competitors_found: int | None = None,
        error_message: str | None = None,
    ) -> None:
        now = _utcnow_str()
        with self._session_factory() as session:
            row = session.get(DiscoveryJobRow, job_id)
            if row is None:
                return
            row.status = status.value
            if status == DiscoveryStatus.IN_PROGRESS:
                row.started_at = now
            if status.is_terminal:
                row.completed_at = now
            if competitors_found is not None:
                row.competitors_found = competitors_found
            if error_message is not None:
                row.error_message = error_message
            session.commit()

    def get_discovery_job(self, job_id: int) -> DiscoveryJob | None:
        with self._session_factory() as session:
            row = session.get(DiscoveryJobRow, job_id)
            if row is None:
                return None
            return self._row_to_job(row)

    def latest_discovery_job(self, website_id: int) -> DiscoveryJob | None:
        with self._session_factory() as session:
            stmt = (
                select(DiscoveryJobRow)
                .where(DiscoveryJobRow.website_id == website_id)
                .order_by(DiscoveryJobRow.id.desc())
                .limit(1)
            )
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return self._row_to_job(row)

    def list_discovery_jobs(self, website_id: int) -> list[DiscoveryJob]:
        with self._session_factory() as session:
            stmt = (
                select(DiscoveryJobRow)
                .where(DiscoveryJobRow.website_id == website_id)
                .order_by(DiscoveryJobRow.id)
            )
            return [self._row_to_job(r) for r in session.scalars(stmt).all()]

    # --- Threat assessments ---

    def add_threat_assessment(
        self, website_id: int, assessment: ThreatAssessment
    ) -> ThreatAssessment:
        with self._session_factory() as session:
            row = ThreatAssessmentRow(
                website_id=website_id,
                threat_level=assessment.threat_level.value,
                threat_score=assessment.threat_score,
                competitor_count=assessment.competitor_count,
                average_competitor_score=assessment.average_competitor_score,
                market_saturation=assessment.market_saturation.value,
                ai_search_visibility=assessment.ai_search_visibility.value,
                assessed_at=_fmt_dt(assessment.assessed_at),
            )
            session.add(row)
            session.commit()
            return self._row_to_assessment(row)

    def latest_threat_assessment(self, website_id: int) -> ThreatAssessment | None:
        with self._session_factory() as session:
            stmt = (
                select(ThreatAssessmentRow)
                .where(ThreatAssessmentRow.website_id == website_id)
                .order_by(ThreatAssessmentRow.assessed_at.desc(), ThreatAssessmentRow.id.desc())
                .limit(1)
            )
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return self._row_to_assessment(row)

    def list_threat_assessments(
        self, website_id: int, since: datetime | None = None
    ) -> list[ThreatAssessment]:
        """Assessment history in chronological order."""
        with self._session_factory() as session:
            stmt = select(ThreatAssessmentRow).where(ThreatAssessmentRow.website_id == website_id)
            if since is not None:
                stmt = stmt.where(ThreatAssessmentRow.assessed_at >= _fmt_dt(since))
            stmt = stmt.order_by(ThreatAssessmentRow.assessed_at, ThreatAssessmentRow.id)
            return [self._row_to_assessment(r) for r in session.scalars(stmt).all()]

    # --- Monthly reports ---

    def upsert_monthly_report(self, report: MonthlyReport) -> MonthlyReport:
        """Insert or replace the report for (website_id, report_month); resets email status."""
        month = report.report_month.isoformat()
        with self._session_factory() as session:
            stmt = select(MonthlyReportRow).where(
                MonthlyReportRow.website_id == report.website_id,
                MonthlyReportRow.report_month == month,
            )
            row = session.scalars(stmt).first()
            if row is None:
                row = MonthlyReportRow(website_id=report.website_id, report_month=month)
                session.add(row)
            row.threat_level = report.threat_level.value
            row.threat_score = report.threat_score
            row.competitor_count = report.competitor_count
            row.top_competitors_json = json.dumps(
                [c.model_dump(mode="json") for c in report.top_competitors]
            )
            row.top_keywords_json = json.dumps(
                [k.model_dump(mode="json") for k in report.top_keywords]
            )
            row.recommendations_json = json.dumps(
                [r.model_dump(mode="json") for r in report.recommendations]
            )
            row.generated_at = _utcnow_str()
            row.email_status = EmailStatus.PENDING.value
            row.email_sent_at = None
            session.commit()
            return self._row_to_report(row)

    def mark_report_email(self, report_id: int, status: EmailStatus) -> None:
        with self._session_factory() as session:
            row = session.get(MonthlyReportRow, report_id)
            if row is None:
                return
            row.email_status = status.value
            if status == EmailStatus.SENT:
                row.email_sent_at = _utcnow_str()
            session.commit()

    def get_monthly_report(self, website_id: int, report_month: date) -> MonthlyReport | None:
        with self._session_factory() as session:
            stmt = select(MonthlyReportRow).where(
                MonthlyReportRow.website_id == website_id,
                MonthlyReportRow.report_month == report_month.isoformat(),
            )
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return self._row_to_report(row)

    # --- Subscriptions ---

    def create_subscription(
        self, user_id: int, status: str = "active", renewal_date: datetime | None = None
    ) -> int:
        with self._session_factory() as session:
            row = SubscriptionRow(
                user_id=user_id,
                status=status,
                renewal_date=_fmt_dt(renewal_date) if renewal_date else None,
            )
            session.add(row)
            session.commit()
            return row.id

    def list_renewing_subscriptions(
        self, after: datetime, until: datetime
    ) -> list[SubscriptionDict]:
        """Active subscriptions whose renewal date falls in (after, until]."""
        with self._session_factory() as session:
            stmt = (
                select(SubscriptionRow, UserRow)
                .join(UserRow, SubscriptionRow.user_id == UserRow.id)
                .where(
                    SubscriptionRow.status == "active",
                    SubscriptionRow.deleted_at.is_(None),
                    SubscriptionRow.renewal_date > _fmt_dt(after),
                    SubscriptionRow.renewal_date <= _fmt_dt(until),
                )
                .order_by(SubscriptionRow.renewal_date)
            )
            results: list[SubscriptionDict] = []
            for sub, user in session.execute(stmt).all():
                results.append(
                    {
                        "id": sub.id,
                        "user_id": sub.user_id,
                        "renewal_date": Database._parse_dt(sub.renewal_date or ""),
                        "email": user.email,
                        "owner_name": user.owner_name,
                    }
                )
            return results

    # --- Helpers ---

    @staticmethod
    def _parse_dt(value: str) -> datetime:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _parse_dt_opt(value: str | None) -> datetime | None:
        if value is None:
            return None
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _row_to_website(row: WebsiteRow, user: UserRow | None = None) -> Website:
        return Website(
            id=row.id,
            user_id=row.user_id,
            business_name=row.business_name,
            business_type=row.business_type,
            location=row.location,
            website_url=row.website_url,
            status=WebsiteStatus(row.status),
            created_at=Database._parse_dt(row.created_at),
            updated_at=Database._parse_dt(row.updated_at),
            deleted_at=Database._parse_dt_opt(row.deleted_at),
            owner_email=user.email if user else "",
            owner_name=user.owner_name if user else "",
        )

    @staticmethod
    def _row_to_competitor(row: CompetitorRow) -> Competitor:
        return Competitor(
            id=row.id,
            website_id=row.website_id,
            competitor_name=row.competitor_name,
            competitor_url=row.competitor_url,
            description=row.description,
            threat_level=ThreatLevel(row.threat_level) if row.threat_level else None,
            threat_score=row.threat_score,
            confidence=row.confidence,
            discovery_method=row.discovery_method,
            discovered_at=Database._parse_dt(row.discovered_at),
            updated_at=Database._parse_dt(row.updated_at),
            deleted_at=Database._parse_dt_opt(row.deleted_at),
        )

    @staticmethod
    def _row_to_job(row: DiscoveryJobRow) -> DiscoveryJob:
        return DiscoveryJob(
            id=row.id,
            website_id=row.website_id,
            status=DiscoveryStatus(row.status),
            discovery_method=row.discovery_method,
            competitors_found=row.competitors_found,
            error_message=row.error_message,
            created_at=Database._parse_dt(row.created_at),
            started_at=Database._parse_dt_opt(row.started_at),
            completed_at=Database._parse_dt_opt(row.completed_at),
        )

    @staticmethod
    def _row_to_assessment(row: ThreatAssessmentRow) -> ThreatAssessment:
        return ThreatAssessment(
            id=row.id,
            website_id=row.website_id,
            threat_level=ThreatLevel(row.threat_level),
            threat_score=row.threat_score,
            competitor_count=row.competitor_count,
            average_competitor_score=row.average_competitor_score,
            market_saturation=Bucket(row.market_saturation),
            ai_search_visibility=Bucket(row.ai_search_visibility),
            assessed_at=Database._parse_dt(row.assessed_at),
        )

    @staticmethod
    def _row_to_report(row: MonthlyReportRow) -> MonthlyReport:
        return MonthlyReport(
            id=row.id,
            website_id=row.website_id,
            report_month=date.fromisoformat(row.report_month),
            threat_level=ThreatLevel(row.threat_level),
            threat_score=row.threat_score,
            competitor_count=row.competitor_count,
            top_competitors=[
                ReportCompetitor.model_validate(c) for c in json.loads(row.top_competitors_json)
            ],
            top_keywords=[
                ReportKeyword.model_validate(k) for k in json.loads(row.top_keywords_json)
            ],
            recommendations=[
                ReportRecommendation.model_validate(r)
                for r in json.loads(row.recommendations_json)
            ],
            generated_at=Database._parse_dt(row.generated_at),
            email_status=EmailStatus(row.email_status),
            email_sent_at=Database._parse_dt_opt(row.email_sent_at),
        )


def _load_str_list(raw: str) -> list[str]:
    data = json.loads(raw) if raw else []
    if not isinstance(data, list):
        return []
    return [str(item) for item in data]


def _fmt_dt(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _utcnow_str() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
