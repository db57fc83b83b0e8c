"""Tests for threat summaries, recommendations and assessment history."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from beamwatch.db import Database
from beamwatch.insights import (
    generate_recommendations,
    rank_competitors,
    summarize_threat,
    threat_color,
    threat_description,
    threat_distribution,
    threat_trend,
)
from beamwatch.models.business import Website
from beamwatch.models.competitor import Competitor, ThreatLevel
from beamwatch.models.threat import Bucket, ThreatAssessment


def _assessment(**overrides) -> ThreatAssessment:
    fields = {
        "threat_level": ThreatLevel.MEDIUM,
        "threat_score": 50,
        "competitor_count": 4,
        "average_competitor_score": 50,
        "market_saturation": Bucket.MEDIUM,
        "ai_search_visibility": Bucket.MEDIUM,
    }
    fields.update(overrides)
    return ThreatAssessment(**fields)


class TestPresentation:
    def test_colors(self):
        assert threat_color(ThreatLevel.CRITICAL) == "#e74c3c"
        assert threat_color("LOW") == "#27ae60"
        assert threat_color("bogus") == "#95a5a6"

    def test_descriptions(self):
        assert threat_description(ThreatLevel.HIGH) == "High threat - Take action soon"
        assert threat_description("bogus") == "Unknown threat level"


class TestRecommendations:
    def test_quiet_market_only_monitoring(self):
        recs = generate_recommendations(_assessment())
        assert [r.title for r in recs] == ["Monitor Competitor Activity"]

    def test_crowded_critical_market(self):
        recs = generate_recommendations(
            _assessment(
                threat_level=ThreatLevel.CRITICAL,
                threat_score=90,
                competitor_count=12,
                average_competitor_score=80,
                market_saturation=Bucket.VERY_HIGH,
                ai_search_visibility=Bucket.VERY_LOW,
            )
        )
        assert [r.title for r in recs] == [
            "Differentiate Your Offering",
            "Improve Competitive Positioning",
            "Focus on Niche Markets",
            "Improve AI Search Visibility",
            "Develop Competitive Response Plan",
        ]
        assert recs[0].priority == ThreatLevel.CRITICAL

    def test_high_level_gets_no_monitoring_advice(self):
        recs = generate_recommendations(_assessment(threat_level=ThreatLevel.HIGH))
        assert recs == []

    def test_summary_bundles_everything(self):
        summary = summarize_threat(_assessment(threat_level=ThreatLevel.LOW))
        assert summary.color == "#27ae60"
        assert summary.description.startswith("Low threat")
        assert len(summary.recommendations) == 1


class TestHistory:
    def test_rank_competitors(self, db: Database, website: Website):
        for name, score in (("Mid", 55), ("Top", 88), ("Low", 20)):
            db.add_competitor(
                Competitor(
                    website_id=website.id,
                    competitor_name=name,
                    competitor_url=f"https://{name.lower()}.example",
                    threat_score=score,
                    threat_level=ThreatLevel.from_score(score),
                )
            )
        ranked = rank_competitors(db, website.id, limit=2)
        assert [(r.rank, r.competitor_name) for r in ranked] == [(1, "Top"), (2, "Mid")]

    def test_trend_window(self, db: Database, website: Website):
        now = datetime(2026, 10, 19, tzinfo=UTC)
        for days_ago, score in ((500, 30), (60, 45), (5, 70)):
            db.add_threat_assessment(
                website.id,
                _assessment(threat_score=score, assessed_at=now - timedelta(days=days_ago)),
            )
        points = threat_trend(db, website.id, months=12, now=now)
        assert [p.threat_score for p in points] == [45, 70]
        assert points[-1].month == "2026-10"

    def test_distribution(self, db: Database, website: Website):
        for level in (ThreatLevel.LOW, ThreatLevel.HIGH, ThreatLevel.LOW):
            db.add_threat_assessment(website.id, _assessment(threat_level=level))
        dist = threat_distribution(db, website.id)
        assert dist == {ThreatLevel.HIGH: 1, ThreatLevel.LOW: 2}
        assert list(dist) == [ThreatLevel.HIGH, ThreatLevel.LOW]
