"""Tests for Pydantic domain models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from beamwatch.models.automation import BatchResult
from beamwatch.models.business import Website, WebsiteStatus
from beamwatch.models.competitor import (
    Candidate,
    ScoredCompetitor,
    ThreatBreakdown,
    ThreatLevel,
    ValidatedCompetitor,
)
from beamwatch.models.discovery import DiscoveryJob, DiscoveryOutcome, DiscoveryStatus
from beamwatch.models.threat import Bucket, ThreatAssessment


class TestThreatLevel:
    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (0, ThreatLevel.LOW),
            (39, ThreatLevel.LOW),
            (40, ThreatLevel.MEDIUM),
            (59, ThreatLevel.MEDIUM),
            (60, ThreatLevel.HIGH),
            (79, ThreatLevel.HIGH),
            (80, ThreatLevel.CRITICAL),
            (100, ThreatLevel.CRITICAL),
        ],
    )
    def test_from_score(self, score: int, level: ThreatLevel):
        assert ThreatLevel.from_score(score) == level

    def test_string_values(self):
        assert ThreatLevel("HIGH") is ThreatLevel.HIGH
        with pytest.raises(ValueError):
            ThreatLevel("SEVERE")


class TestWebsite:
    def test_defaults(self):
        site = Website(business_name="Bean There")
        assert site.id is None
        assert site.status == WebsiteStatus.ACTIVE
        assert site.deleted_at is None
        assert site.owner_email == ""

    def test_frozen(self):
        site = Website(business_name="Bean There")
        with pytest.raises(ValidationError):
            site.business_name = "Changed"


class TestCompetitorModels:
    def test_candidate_identity_is_url(self):
        a = Candidate(name="A", url="https://a.example", agent_id=1)
        assert a.model_copy(update={"agent_id": 2}).url == a.url

    def test_validated_scores_bounded(self):
        with pytest.raises(ValidationError):
            ValidatedCompetitor(name="A", url="https://a.example", confidence=101)

    def test_breakdown_sub_scores_bounded(self):
        with pytest.raises(ValidationError):
            ThreatBreakdown(company_size_score=26)

    def test_neutral_breakdown(self):
        neutral = ThreatBreakdown.neutral()
        assert neutral.threat_score == 50
        assert neutral.threat_level == ThreatLevel.MEDIUM
        assert neutral.is_default

    def test_scored_defaults_to_neutral(self):
        scored = ScoredCompetitor(name="A", url="https://a.example", is_competitor=True)
        assert scored.threat_score == 50
        assert scored.threat_level == ThreatLevel.MEDIUM
        assert scored.threat.is_default


class TestDiscoveryModels:
    @pytest.mark.parametrize(
        ("status", "terminal"),
        [
            (DiscoveryStatus.PENDING, False),
            (DiscoveryStatus.IN_PROGRESS, False),
            (DiscoveryStatus.COMPLETED, True),
            (DiscoveryStatus.FAILED, True),
        ],
    )
    def test_is_terminal(self, status: DiscoveryStatus, terminal: bool):
        assert status.is_terminal is terminal

    def test_job_defaults(self):
        job = DiscoveryJob(website_id=1)
        assert job.status == DiscoveryStatus.PENDING
        assert job.discovery_method == "v4_multi_agent"
        assert job.competitors_found == 0

    def test_outcome_counts_competitors(self):
        outcome = DiscoveryOutcome(
            job_id=1,
            website_id=1,
            candidates_found=6,
            competitors=[ScoredCompetitor(name="A", url="https://a.example")],
        )
        assert outcome.competitors_found == 1


class TestThreatAssessment:
    def test_score_bounded(self):
        with pytest.raises(ValidationError):
            ThreatAssessment(threat_level=ThreatLevel.HIGH, threat_score=101)

    def test_bucket_defaults(self):
        a = ThreatAssessment(threat_level=ThreatLevel.LOW, threat_score=10)
        assert a.market_saturation == Bucket.VERY_LOW
        assert a.ai_search_visibility == Bucket.VERY_LOW


class TestBatchResult:
    def test_total(self):
        now = datetime.now(UTC)
        result = BatchResult(
            job="weekly_refresh",
            success_count=4,
            error_count=1,
            started_at=now,
            finished_at=now,
        )
        assert result.total == 5
