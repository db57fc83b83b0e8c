"""FastAPI test client fixtures."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from beamwatch.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from beamwatch.api.routes import system, websites
from beamwatch.models.competitor import ScoredCompetitor, ThreatBreakdown, ThreatLevel
from beamwatch.models.threat import Bucket, ThreatAssessment

if TYPE_CHECKING:
    from beamwatch.config import Settings
    from beamwatch.db import Database
    from beamwatch.models.business import Website


def _create_test_app(db: Database, settings: Settings) -> FastAPI:
    """Create a FastAPI app with injected test db/settings (no lifespan)."""
    app = FastAPI(title="Beamwatch Test")

    app.state.db = db
    app.state.settings = settings

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)

    prefix = "/api/v1"
    app.include_router(system.router, prefix=prefix)
    app.include_router(websites.router, prefix=prefix)

    return app


@pytest.fixture()
def client(db: Database, settings: Settings) -> TestClient:
    app = _create_test_app(db, settings)
    return TestClient(app)


@pytest.fixture()
def populated_db(db: Database, website: Website) -> Database:
    """DB with scored competitors and two threat assessments for the fixture website."""
    for name, score in (("Common Grounds", 82), ("Daily Grind", 45), ("Brew Bros", 61)):
        slug = name.lower().replace(" ", "")
        db.upsert_competitor(
            website.id,
            ScoredCompetitor(
                name=name,
                url=f"https://{slug}.example",
                is_competitor=True,
                confidence=88,
                threat=ThreatBreakdown(
                    threat_score=score, threat_level=ThreatLevel.from_score(score)
                ),
            ),
        )
    now = datetime.now(UTC)
    for level, score, age_days in ((ThreatLevel.MEDIUM, 55, 40), (ThreatLevel.HIGH, 70, 1)):
        db.add_threat_assessment(
            website.id,
            ThreatAssessment(
                threat_level=level,
                threat_score=score,
                competitor_count=3,
                average_competitor_score=63,
                market_saturation=Bucket.LOW,
                ai_search_visibility=Bucket.MEDIUM,
                assessed_at=now - timedelta(days=age_days),
            ),
        )
    return db


@pytest.fixture()
def populated_client(populated_db: Database, settings: Settings) -> TestClient:
    app = _create_test_app(populated_db, settings)
    return TestClient(app)
