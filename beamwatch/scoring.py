"""Aggregate site-level threat scoring.

Deterministic function of a website's persisted competitor scores and its
keyword count. Independent of the per-competitor scores the discovery run
assigns, other than consuming them as input.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

from beamwatch.models.competitor import ThreatLevel
from beamwatch.models.threat import Bucket, ThreatAssessment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from beamwatch.db import Database

logger = structlog.get_logger()

DEFAULT_COMPETITOR_SCORE = 50
EMPTY_MARKET_SCORE = 20

_ESCALATE_ONE_STEP = {
    ThreatLevel.LOW: ThreatLevel.MEDIUM,
    ThreatLevel.MEDIUM: ThreatLevel.HIGH,
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def market_saturation_for(competitor_count: int) -> Bucket:
    """Saturation bucket by competitor count. Both 3-4 and 5-6 map to medium."""
    if competitor_count >= 10:
        return Bucket.VERY_HIGH
    if competitor_count >= 7:
        return Bucket.HIGH
    if competitor_count >= 3:
        return Bucket.MEDIUM
    return Bucket.VERY_LOW


def search_visibility_for(keyword_count: int) -> Bucket:
    """AI search visibility bucket by tracked keyword count."""
    if keyword_count >= 20:
        return Bucket.VERY_HIGH
    if keyword_count >= 15:
        return Bucket.HIGH
    if keyword_count >= 10:
        return Bucket.MEDIUM
    if keyword_count >= 5:
        return Bucket.LOW
    return Bucket.VERY_LOW


def _base_threat(competitor_count: int) -> tuple[ThreatLevel, int]:
    if competitor_count >= 10:
        return ThreatLevel.CRITICAL, min(100, 80 + 2 * (competitor_count - 10))
    if competitor_count >= 7:
        return ThreatLevel.HIGH, min(100, 65 + 3 * (competitor_count - 7))
    if competitor_count >= 5:
        return ThreatLevel.MEDIUM, min(100, 50 + 3 * (competitor_count - 5))
    if competitor_count >= 3:
        return ThreatLevel.MEDIUM, 40 + 2 * competitor_count
    return ThreatLevel.LOW, 20 + 5 * competitor_count


def calculate_threat_assessment(
    competitor_scores: Sequence[int | None], keyword_count: int
) -> ThreatAssessment:
    """Compute the aggregate threat for one website.

    Args:
        competitor_scores: threat_score of every non-deleted competitor; None
            counts as 50.
        keyword_count: number of tracked keywords for the website.
    """
    visibility = search_visibility_for(keyword_count)
    count = len(competitor_scores)
    if count == 0:
        return ThreatAssessment(
            threat_level=ThreatLevel.LOW,
            threat_score=EMPTY_MARKET_SCORE,
            competitor_count=0,
            average_competitor_score=0,
            market_saturation=Bucket.VERY_LOW,
            ai_search_visibility=visibility,
        )

    scores = [DEFAULT_COMPETITOR_SCORE if s is None else s for s in competitor_scores]
    average = _round_half_up(sum(scores) / count)
    strongest = max(scores)

    level, score = _base_threat(count)

    # The strongest single competitor can override the count-based level.
    if strongest >= 90:
        level = ThreatLevel.CRITICAL
        score = max(score, 85)
    elif strongest >= 75:
        level = _ESCALATE_ONE_STEP.get(level, level)
        score = max(score, 70)

    return ThreatAssessment(
        threat_level=level,
        threat_score=max(0, min(100, score)),
        competitor_count=count,
        average_competitor_score=average,
        market_saturation=market_saturation_for(count),
        ai_search_visibility=visibility,
    )


def assess_website(db: Database, website_id: int) -> ThreatAssessment:
    """Compute the aggregate threat from stored rows and append an assessment."""
    competitors = db.list_competitors(website_id)
    keyword_count = db.count_keywords(website_id)
    assessment = calculate_threat_assessment(
        [c.threat_score for c in competitors], keyword_count
    )
    stored = db.add_threat_assessment(website_id, assessment)
    logger.info(
        "Threat assessment recorded",
        website_id=website_id,
        threat_level=stored.threat_level.value,
        threat_score=stored.threat_score,
        competitor_count=stored.competitor_count,
    )
    return stored
