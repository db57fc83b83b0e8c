"""Threat summaries, recommendations, competitor ranking and assessment history."""

from __future__ import annotations

import calendar
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from beamwatch.models.competitor import ThreatLevel
from beamwatch.models.threat import (
    Bucket,
    RankedCompetitor,
    Recommendation,
    ThreatSummary,
    TrendPoint,
)

if TYPE_CHECKING:
    from beamwatch.db import Database
    from beamwatch.models.threat import ThreatAssessment

_COLORS = {
    ThreatLevel.CRITICAL: "#e74c3c",
    ThreatLevel.HIGH: "#e67e22",
    ThreatLevel.MEDIUM: "#f39c12",
    ThreatLevel.LOW: "#27ae60",
}
_UNKNOWN_COLOR = "#95a5a6"

_DESCRIPTIONS = {
    ThreatLevel.CRITICAL: "Critical threat - Immediate action required",
    ThreatLevel.HIGH: "High threat - Take action soon",
    ThreatLevel.MEDIUM: "Medium threat - Monitor closely",
    ThreatLevel.LOW: "Low threat - Maintain current strategy",
}

_LEVEL_ORDER = (ThreatLevel.CRITICAL, ThreatLevel.HIGH, ThreatLevel.MEDIUM, ThreatLevel.LOW)


def threat_color(level: ThreatLevel | str) -> str:
    try:
        return _COLORS[ThreatLevel(level)]
    except ValueError:
        return _UNKNOWN_COLOR


def threat_description(level: ThreatLevel | str) -> str:
    try:
        return _DESCRIPTIONS[ThreatLevel(level)]
    except ValueError:
        return "Unknown threat level"


def generate_recommendations(assessment: ThreatAssessment) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    if assessment.competitor_count >= 10:
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.CRITICAL,
                title="Differentiate Your Offering",
                description="With 10+ competitors, focus on unique value proposition",
                category="strategy",
            )
        )

    if assessment.average_competitor_score >= 75:
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.HIGH,
                title="Improve Competitive Positioning",
                description="Your competitors are strong. Enhance your features and marketing.",
                category="product",
            )
        )

    if assessment.market_saturation in (Bucket.VERY_HIGH, Bucket.HIGH):
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.HIGH,
                title="Focus on Niche Markets",
                description="Consider targeting specific customer segments or geographic areas",
                category="market",
            )
        )

    if assessment.ai_search_visibility in (Bucket.VERY_LOW, Bucket.LOW):
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.HIGH,
                title="Improve AI Search Visibility",
                description=(
                    "Optimize content for AI-driven search engines "
                    "(ChatGPT, Perplexity, Gemini)"
                ),
                category="content",
            )
        )

    if assessment.threat_level == ThreatLevel.CRITICAL:
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.CRITICAL,
                title="Develop Competitive Response Plan",
                description="Create a detailed strategy to address competitive threats",
                category="strategy",
            )
        )

    if assessment.threat_level in (ThreatLevel.LOW, ThreatLevel.MEDIUM):
        recommendations.append(
            Recommendation(
                priority=ThreatLevel.MEDIUM,
                title="Monitor Competitor Activity",
                description="Set up alerts for new competitors and market changes",
                category="monitoring",
            )
        )

    return recommendations


def summarize_threat(assessment: ThreatAssessment) -> ThreatSummary:
    return ThreatSummary(
        assessment=assessment,
        color=threat_color(assessment.threat_level),
        description=threat_description(assessment.threat_level),
        recommendations=generate_recommendations(assessment),
    )


def rank_competitors(db: Database, website_id: int, limit: int = 10) -> list[RankedCompetitor]:
    """Top competitors by stored threat score, ranked from 1."""
    return [
        RankedCompetitor(
            rank=rank,
            competitor_id=c.id or 0,
            competitor_name=c.competitor_name,
            competitor_url=c.competitor_url,
            threat_level=c.threat_level,
            threat_score=c.threat_score,
            confidence=c.confidence,
            discovered_at=c.discovered_at,
        )
        for rank, c in enumerate(db.list_competitors(website_id, limit=limit), start=1)
    ]


def _months_ago(now: datetime, months: int) -> datetime:
    total = now.year * 12 + (now.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def threat_trend(
    db: Database, website_id: int, months: int = 12, now: datetime | None = None
) -> list[TrendPoint]:
    """Assessments from the last *months* months, oldest first."""
    since = _months_ago(now or datetime.now(UTC), months)
    return [
        TrendPoint(
            month=a.assessed_at.strftime("%Y-%m"),
            threat_level=a.threat_level,
            threat_score=a.threat_score,
            competitor_count=a.competitor_count,
            average_competitor_score=a.average_competitor_score,
        )
        for a in db.list_threat_assessments(website_id, since=since)
    ]


def threat_distribution(db: Database, website_id: int) -> dict[ThreatLevel, int]:
    """Count of stored assessments per level, CRITICAL first; absent levels omitted."""
    counts: dict[ThreatLevel, int] = {}
    for assessment in db.list_threat_assessments(website_id):
        counts[assessment.threat_level] = counts.get(assessment.threat_level, 0) + 1
    return {level: counts[level] for level in _LEVEL_ORDER if level in counts}
