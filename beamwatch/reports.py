"""Monthly report compilation and rendering."""

from __future__ import annotations

from datetime import UTC, date, datetime
from html import escape
from typing import TYPE_CHECKING

from beamwatch.insights import generate_recommendations, threat_color
from beamwatch.models.competitor import ThreatLevel
from beamwatch.models.report import (
    MonthlyReport,
    ReportCompetitor,
    ReportKeyword,
    ReportRecommendation,
)

if TYPE_CHECKING:
    from beamwatch.db import Database
    from beamwatch.models.business import Website

TOP_COMPETITORS = 5
TOP_KEYWORDS = 10
TOP_RECOMMENDATIONS = 5


def report_month_for(now: datetime) -> date:
    return now.date().replace(day=1)


def compile_monthly_report(
    db: Database, website_id: int, now: datetime | None = None
) -> MonthlyReport:
    """Assemble this month's report from the latest stored assessment.

    With no assessment on record the report carries MEDIUM / 50 and no
    recommendations.
    """
    now = now or datetime.now(UTC)
    assessment = db.latest_threat_assessment(website_id)
    competitors = db.list_competitors(website_id, limit=TOP_COMPETITORS)
    keywords = db.top_keywords(website_id, limit=TOP_KEYWORDS)

    recommendations: list[ReportRecommendation] = []
    if assessment is not None:
        recommendations = [
            ReportRecommendation(title=r.title, priority=r.priority.value)
            for r in generate_recommendations(assessment)
        ][:TOP_RECOMMENDATIONS]

    return MonthlyReport(
        website_id=website_id,
        report_month=report_month_for(now),
        threat_level=assessment.threat_level if assessment else ThreatLevel.MEDIUM,
        threat_score=assessment.threat_score if assessment else 50,
        competitor_count=len(competitors),
        top_competitors=[
            ReportCompetitor(
                name=c.competitor_name, threat_level=c.threat_level, threat_score=c.threat_score
            )
            for c in competitors
        ],
        top_keywords=[
            ReportKeyword(keyword=k["keyword"], relevance_score=k["relevance_score"])
            for k in keywords
        ],
        recommendations=recommendations,
    )


def report_subject(website: Website, report: MonthlyReport) -> str:
    return f"BEAM Monthly Report - {website.business_name} - {report.report_month:%B %Y}"


def render_report_html(website: Website, report: MonthlyReport) -> str:
    competitor_rows = "".join(
        f"<tr><td>{escape(c.name)}</td><td>{c.threat_level or '-'}</td>"
        f"<td>{c.threat_score if c.threat_score is not None else '-'}</td></tr>"
        for c in report.top_competitors
    )
    keyword_items = "".join(f"<li>{escape(k.keyword)}</li>" for k in report.top_keywords)
    action_items = "".join(
        f"<li><strong>{escape(r.priority)}</strong> {escape(r.title)}</li>"
        for r in report.recommendations
    )
    greeting = escape(website.owner_name) if website.owner_name else "there"
    return f"""<html><body style="font-family: Arial, sans-serif; color: #333;">
<h1>BEAM Monthly Report</h1>
<p>Hello {greeting},</p>
<p>Here is the {report.report_month:%B %Y} competitive picture for
<strong>{escape(website.business_name)}</strong>.</p>
<p style="color: {threat_color(report.threat_level)};">
Threat level: <strong>{report.threat_level}</strong> ({report.threat_score}/100)</p>
<h2>Top competitors ({report.competitor_count})</h2>
<table><tr><th>Name</th><th>Level</th><th>Score</th></tr>{competitor_rows}</table>
<h2>Top keywords</h2><ul>{keyword_items}</ul>
<h2>Recommended actions</h2><ul>{action_items}</ul>
</body></html>"""


def render_renewal_html(owner_name: str, renewal_date: datetime) -> str:
    name = escape(owner_name) if owner_name else "there"
    return f"""<p>Hello {name},</p>
<p>Your BEAM subscription will renew on {renewal_date:%Y-%m-%d}.</p>
<p>Your account will continue to have full access to all BEAM features.</p>
<p>If you have any questions, please contact us at support@beam.example.com</p>"""
