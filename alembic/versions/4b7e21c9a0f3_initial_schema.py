"""initial schema

Revision ID: 4b7e21c9a0f3
Revises:
Create Date: 2026-10-19 10:12:41.204817

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4b7e21c9a0f3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all Beamwatch tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("owner_name", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
    )

    op.create_table(
        "business_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type_name", sa.Text, nullable=False, unique=True),
        sa.Column("keywords_json", sa.Text, nullable=False, server_default="[]"),
        sa.Column("typical_competitors_json", sa.Text, nullable=False, server_default="[]"),
    )

    op.create_table(
        "websites",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("business_name", sa.Text, nullable=False),
        sa.Column("business_type", sa.Text, nullable=False, server_default=""),
        sa.Column("location", sa.Text, nullable=False, server_default=""),
        sa.Column("website_url", sa.Text, nullable=False, server_default=""),
        sa.Column("status", sa.Text, nullable=False, server_default="active"),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
        sa.CheckConstraint("status IN ('active', 'paused')", name="ck_websites_status"),
    )
    op.create_index("idx_websites_status", "websites", ["status", "deleted_at"])

    op.create_table(
        "keywords",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("website_id", sa.Integer, sa.ForeignKey("websites.id"), nullable=False),
        sa.Column("keyword", sa.Text, nullable=False),
        sa.Column("relevance_score", sa.Float, nullable=False, server_default="0"),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
    )
    op.create_index("idx_keywords_website", "keywords", ["website_id"])

    op.create_table(
        "competitors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("website_id", sa.Integer, sa.ForeignKey("websites.id"), nullable=False),
        sa.Column("competitor_name", sa.Text, nullable=False),
        sa.Column("competitor_url", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("threat_level", sa.Text, nullable=True),
        sa.Column("threat_score", sa.Integer, nullable=True),
        sa.Column("confidence", sa.Float, nullable=True),
        sa.Column("discovery_method", sa.Text, nullable=False, server_default=""),
        sa.Column("discovered_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
        sa.UniqueConstraint("website_id", "competitor_url", name="uq_competitors_website_url"),
        sa.CheckConstraint(
            "threat_level IS NULL OR threat_level IN ('CRITICAL', 'HIGH', 'MEDIUM', 'LOW')",
            name="ck_competitors_threat_level",
        ),
    )
    op.create_index("idx_competitors_website", "competitors", ["website_id"])

    op.create_table(
        "discovery_jobs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("website_id", sa.Integer, sa.ForeignKey("websites.id"), nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="pending"),
        sa.Column("discovery_method", sa.Text, nullable=False, server_default=""),
        sa.Column("competitors_found", sa.Integer, nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("worker_id", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("started_at", sa.Text, nullable=True),
        sa.Column("completed_at", sa.Text, nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'failed')",
            name="ck_discovery_jobs_status",
        ),
    )
    op.create_index("idx_discovery_jobs_website", "discovery_jobs", ["website_id", "id"])
    op.create_index(
        "uq_discovery_jobs_active_website",
        "discovery_jobs",
        ["website_id"],
        unique=True,
        sqlite_where=sa.text("status IN ('pending', 'in_progress')"),
    )

    op.create_table(
        "threat_assessments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("website_id", sa.Integer, sa.ForeignKey("websites.id"), nullable=False),
        sa.Column("threat_level", sa.Text, nullable=False),
        sa.Column("threat_score", sa.Integer, nullable=False),
        sa.Column("competitor_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("average_competitor_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("market_saturation", sa.Text, nullable=False, server_default="very_low"),
        sa.Column("ai_search_visibility", sa.Text, nullable=False, server_default="very_low"),
        sa.Column("assessed_at", sa.Text, nullable=False),
    )
    op.create_index(
        "idx_threat_assessments_website", "threat_assessments", ["website_id", "assessed_at"]
    )

    op.create_table(
        "monthly_reports",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("website_id", sa.Integer, sa.ForeignKey("websites.id"), nullable=False),
        sa.Column("report_month", sa.Text, nullable=False),
        sa.Column("threat_level", sa.Text, nullable=False),
        sa.Column("threat_score", sa.Integer, nullable=False),
        sa.Column("competitor_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("top_competitors_json", sa.Text, nullable=False, server_default="[]"),
        sa.Column("top_keywords_json", sa.Text, nullable=False, server_default="[]"),
        sa.Column("recommendations_json", sa.Text, nullable=False, server_default="[]"),
        sa.Column("generated_at", sa.Text, nullable=False),
        sa.Column("email_status", sa.Text, nullable=False, server_default="pending"),
        sa.Column("email_sent_at", sa.Text, nullable=True),
        sa.UniqueConstraint(
            "website_id", "report_month", name="uq_monthly_reports_website_month"
        ),
        sa.CheckConstraint(
            "email_status IN ('pending', 'sent', 'failed')",
            name="ck_monthly_reports_email_status",
        ),
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="incomplete"),
        sa.Column("renewal_date", sa.Text, nullable=True),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
    )
    op.create_index("idx_subscriptions_status", "subscriptions", ["status", "renewal_date"])


def downgrade() -> None:
    """Drop all Beamwatch tables."""
    op.drop_table("subscriptions")
    op.drop_table("monthly_reports")
    op.drop_table("threat_assessments")
    op.drop_table("discovery_jobs")
    op.drop_table("competitors")
    op.drop_table("keywords")
    op.drop_table("websites")
    op.drop_table("business_types")
    op.drop_table("users")
