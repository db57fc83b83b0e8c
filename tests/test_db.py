"""Tests for the database facade."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from beamwatch.db import Database
from beamwatch.models.business import Website, WebsiteStatus
from beamwatch.models.competitor import (
    Competitor,
    ScoredCompetitor,
    ThreatBreakdown,
    ThreatLevel,
)
from beamwatch.models.discovery import DiscoveryStatus
from beamwatch.models.report import EmailStatus, MonthlyReport
from beamwatch.models.threat import Bucket, ThreatAssessment


def _scored(url: str, score: int, name: str = "Rival") -> ScoredCompetitor:
    return ScoredCompetitor(
        name=name,
        url=url,
        is_competitor=True,
        confidence=90,
        threat=ThreatBreakdown(threat_score=score, threat_level=ThreatLevel.from_score(score)),
    )


class TestWebsites:
    def test_create_and_get(self, db: Database, website: Website):
        got = db.get_website(website.id)
        assert got is not None
        assert got.business_name == "Bean There"
        assert got.status == WebsiteStatus.ACTIVE

    def test_get_nonexistent(self, db: Database):
        assert db.get_website(9999) is None

    def test_soft_deleted_hidden_unless_requested(self, db: Database, website: Website):
        db.soft_delete_website(website.id)
        assert db.get_website(website.id) is None
        got = db.get_website(website.id, include_deleted=True)
        assert got is not None
        assert got.deleted_at is not None

    def test_list_active_excludes_paused_and_deleted(self, db: Database, website: Website):
        paused = db.create_website(
            Website(business_name="Paused", status=WebsiteStatus.PAUSED)
        )
        gone = db.create_website(Website(business_name="Gone"))
        db.soft_delete_website(gone.id)

        active = db.list_active_websites()
        ids = [w.id for w in active]
        assert ids == [website.id]
        assert paused.id not in ids
        assert active[0].owner_email == "owner@beanthere.example"
        assert active[0].owner_name == "Sam"

    def test_touch_moves_website_to_end(self, db: Database, website: Website):
        other = db.create_website(Website(business_name="Other"))
        db.touch_website(website.id)
        assert [w.id for w in db.list_active_websites()] == [other.id, website.id]


class TestBusinessTypes:
    def test_taxonomy_lists(self, db: Database, website: Website):
        taxonomy = db.get_business_type("coffee shop")
        assert taxonomy is not None
        assert taxonomy["keywords"] == ["espresso", "latte", "cafe"]
        assert taxonomy["typical_competitors"] == ["Starbucks", "Peet's"]

    def test_upsert_replaces(self, db: Database):
        db.upsert_business_type("bakery", keywords=["bread"])
        db.upsert_business_type("bakery", keywords=["cake"], typical_competitors=["Paul"])
        taxonomy = db.get_business_type("bakery")
        assert taxonomy is not None
        assert taxonomy["keywords"] == ["cake"]
        assert taxonomy["typical_competitors"] == ["Paul"]

    def test_missing_type(self, db: Database):
        assert db.get_business_type("unknown") is None


class TestKeywords:
    def test_count_and_top(self, db: Database, website: Website):
        db.add_keyword(website.id, "espresso", relevance_score=0.4)
        db.add_keyword(website.id, "cold brew", relevance_score=0.9)
        db.add_keyword(website.id, "latte", relevance_score=0.7)

        assert db.count_keywords(website.id) == 3
        top = db.top_keywords(website.id, limit=2)
        assert [k["keyword"] for k in top] == ["cold brew", "latte"]


class TestCompetitors:
    def test_upsert_is_idempotent(self, db: Database, website: Website):
        first = db.upsert_competitor(website.id, _scored("https://rival.example", 40))
        second = db.upsert_competitor(website.id, _scored("https://rival.example", 72))

        assert first == second
        rows = db.list_competitors(website.id)
        assert len(rows) == 1
        assert rows[0].threat_score == 72
        assert rows[0].threat_level == ThreatLevel.HIGH
        assert rows[0].discovery_method == "v4_multi_agent"

    def test_same_url_on_other_website_is_separate(self, db: Database, website: Website):
        other = db.create_website(Website(business_name="Other"))
        db.upsert_competitor(website.id, _scored("https://rival.example", 40))
        db.upsert_competitor(other.id, _scored("https://rival.example", 40))
        assert len(db.list_competitors(website.id)) == 1
        assert len(db.list_competitors(other.id)) == 1

    def test_upsert_keeps_soft_delete(self, db: Database, website: Website):
        comp_id = db.upsert_competitor(website.id, _scored("https://rival.example", 40))
        db.soft_delete_competitor(comp_id)
        db.upsert_competitor(website.id, _scored("https://rival.example", 90))
        assert db.list_competitors(website.id) == []

    def test_list_orders_by_score_with_nulls_last(self, db: Database, website: Website):
        db.add_competitor(
            Competitor(
                website_id=website.id,
                competitor_name="Unscored",
                competitor_url="https://unscored.example",
            )
        )
        db.upsert_competitor(website.id, _scored("https://low.example", 30))
        db.upsert_competitor(website.id, _scored("https://high.example", 85))

        urls = [c.competitor_url for c in db.list_competitors(website.id)]
        assert urls == [
            "https://high.example",
            "https://low.example",
            "https://unscored.example",
        ]
        assert len(db.list_competitors(website.id, limit=1)) == 1


class TestDiscoveryJobs:
    def test_lifecycle_timestamps(self, db: Database, website: Website):
        job = db.create_discovery_job(website.id, worker_id="w1")
        assert job.status == DiscoveryStatus.PENDING
        assert job.started_at is None

        db.update_discovery_job(job.id, DiscoveryStatus.IN_PROGRESS)
        running = db.get_discovery_job(job.id)
        assert running.status == DiscoveryStatus.IN_PROGRESS
        assert running.started_at is not None
        assert running.completed_at is None

        db.update_discovery_job(job.id, DiscoveryStatus.COMPLETED, competitors_found=4)
        done = db.get_discovery_job(job.id)
        assert done.status == DiscoveryStatus.COMPLETED
        assert done.competitors_found == 4
        assert done.completed_at is not None

    def test_failed_keeps_error_message(self, db: Database, website: Website):
        job = db.create_discovery_job(website.id)
        db.update_discovery_job(job.id, DiscoveryStatus.FAILED, error_message="boom")
        failed = db.get_discovery_job(job.id)
        assert failed.error_message == "boom"
        assert failed.completed_at is not None

    def test_latest_job(self, db: Database, website: Website):
        assert db.latest_discovery_job(website.id) is None
        first = db.create_discovery_job(website.id)
        db.update_discovery_job(first.id, DiscoveryStatus.COMPLETED)
        second = db.create_discovery_job(website.id)
        assert db.latest_discovery_job(website.id).id == second.id
        assert len(db.list_discovery_jobs(website.id)) == 2

    def test_second_unfinished_job_rejected(self, db: Database, website: Website):
        db.create_discovery_job(website.id)
        with pytest.raises(IntegrityError):
            db.create_discovery_job(website.id)

    def test_claim_creates_pending_job(self, db: Database, website: Website):
        job = db.claim_discovery_job(
            website.id, stale_before=datetime.now(UTC) - timedelta(hours=1), worker_id="w2"
        )
        assert job is not None
        assert job.status == DiscoveryStatus.PENDING
        assert db.latest_discovery_job(website.id).id == job.id

    def test_claim_refused_while_job_active(self, db: Database, website: Website):
        running = db.create_discovery_job(website.id)
        db.update_discovery_job(running.id, DiscoveryStatus.IN_PROGRESS)

        claimed = db.claim_discovery_job(
            website.id, stale_before=datetime.now(UTC) - timedelta(hours=1)
        )

        assert claimed is None
        assert [j.id for j in db.list_discovery_jobs(website.id)] == [running.id]
        assert db.get_discovery_job(running.id).status == DiscoveryStatus.IN_PROGRESS

    def test_claim_fails_abandoned_job(self, db: Database, website: Website):
        abandoned = db.create_discovery_job(website.id)

        # Everything created before "one minute from now" counts as stale
        claimed = db.claim_discovery_job(
            website.id, stale_before=datetime.now(UTC) + timedelta(minutes=1)
        )

        assert claimed is not None
        old = db.get_discovery_job(abandoned.id)
        assert old.status == DiscoveryStatus.FAILED
        assert old.error_message.startswith("Abandoned")
        assert old.completed_at is not None


class TestThreatAssessments:
    def _assessment(self, level: ThreatLevel, score: int, at: datetime) -> ThreatAssessment:
        return ThreatAssessment(
            threat_level=level,
            threat_score=score,
            competitor_count=3,
            average_competitor_score=score,
            market_saturation=Bucket.MEDIUM,
            ai_search_visibility=Bucket.LOW,
            assessed_at=at,
        )

    def test_append_and_latest(self, db: Database, website: Website):
        now = datetime.now(UTC)
        db.add_threat_assessment(
            website.id, self._assessment(ThreatLevel.LOW, 25, now - timedelta(days=7))
        )
        db.add_threat_assessment(website.id, self._assessment(ThreatLevel.HIGH, 70, now))

        latest = db.latest_threat_assessment(website.id)
        assert latest.threat_level == ThreatLevel.HIGH
        assert latest.market_saturation == Bucket.MEDIUM
        assert len(db.list_threat_assessments(website.id)) == 2

    def test_since_filter(self, db: Database, website: Website):
        now = datetime.now(UTC)
        db.add_threat_assessment(
            website.id, self._assessment(ThreatLevel.LOW, 25, now - timedelta(days=400))
        )
        db.add_threat_assessment(website.id, self._assessment(ThreatLevel.HIGH, 70, now))
        recent = db.list_threat_assessments(website.id, since=now - timedelta(days=30))
        assert [a.threat_score for a in recent] == [70]


class TestMonthlyReports:
    def test_upsert_resets_email_status(self, db: Database, website: Website):
        report = MonthlyReport(website_id=website.id, report_month=date(2026, 10, 1))
        stored = db.upsert_monthly_report(report)
        db.mark_report_email(stored.id, EmailStatus.SENT)
        assert db.get_monthly_report(website.id, date(2026, 10, 1)).email_status == "sent"

        again = db.upsert_monthly_report(report.model_copy(update={"threat_score": 80}))
        assert again.id == stored.id
        assert again.threat_score == 80
        assert again.email_status == EmailStatus.PENDING
        assert again.email_sent_at is None


class TestSubscriptions:
    def test_renewal_window(self, db: Database):
        now = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
        soon = db.create_user("soon@example.com", owner_name="Soon")
        later = db.create_user("later@example.com")
        inactive = db.create_user("inactive@example.com")
        db.create_subscription(soon, renewal_date=now + timedelta(days=3))
        db.create_subscription(later, renewal_date=now + timedelta(days=30))
        db.create_subscription(inactive, status="canceled", renewal_date=now + timedelta(days=2))

        due = db.list_renewing_subscriptions(now, now + timedelta(days=7))
        assert [s["email"] for s in due] == ["soon@example.com"]
        assert due[0]["owner_name"] == "Soon"
