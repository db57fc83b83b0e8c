"""Tests for Alembic migration infrastructure."""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic.config import Config
from sqlalchemy import create_engine, inspect

from alembic import command

if TYPE_CHECKING:
    from pathlib import Path

TABLES = {
    "users",
    "business_types",
    "websites",
    "keywords",
    "competitors",
    "discovery_jobs",
    "threat_assessments",
    "monthly_reports",
    "subscriptions",
}


def _config(db_path: Path) -> Config:
    cfg = Config("alembic.ini")
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    return cfg


def _run_migrations(db_path: Path) -> None:
    """Run Alembic migrations to head on the given database."""
    command.upgrade(_config(db_path), "head")


class TestAlembicMigrations:
    def test_upgrade_to_head_creates_all_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test_alembic.db"
        _run_migrations(db_path)

        engine = create_engine(f"sqlite:///{db_path}")
        tables = set(inspect(engine).get_table_names())
        engine.dispose()

        assert TABLES | {"alembic_version"} == tables

    def test_competitors_table_has_expected_columns(self, tmp_path: Path) -> None:
        """Verify competitors table schema matches ORM definition."""
        db_path = tmp_path / "test_alembic.db"
        _run_migrations(db_path)

        engine = create_engine(f"sqlite:///{db_path}")
        columns = {c["name"] for c in inspect(engine).get_columns("competitors")}
        engine.dispose()

        assert columns == {
            "id",
            "website_id",
            "competitor_name",
            "competitor_url",
            "description",
            "threat_level",
            "threat_score",
            "confidence",
            "discovery_method",
            "discovered_at",
            "updated_at",
            "deleted_at",
        }

    def test_competitor_url_unique_per_website(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test_alembic.db"
        _run_migrations(db_path)

        engine = create_engine(f"sqlite:///{db_path}")
        uniques = inspect(engine).get_unique_constraints("competitors")
        engine.dispose()

        assert any(u["column_names"] == ["website_id", "competitor_url"] for u in uniques)

    def test_downgrade_drops_all_tables(self, tmp_path: Path) -> None:
        """Running downgrade removes all Beamwatch tables."""
        db_path = tmp_path / "test_alembic.db"
        cfg = _config(db_path)

        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        engine = create_engine(f"sqlite:///{db_path}")
        tables = set(inspect(engine).get_table_names())
        engine.dispose()

        # Only alembic_version should remain
        assert tables == {"alembic_version"}
