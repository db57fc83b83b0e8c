"""Huey task queue definitions: on-demand discovery and the recurring batches."""

from __future__ import annotations

import structlog
from huey import SqliteHuey

from beamwatch.config import Settings
from beamwatch.db import Database
from beamwatch.orchestrator.scheduler import AutomationScheduler

logger = structlog.get_logger()

# Initialize Huey with settings
_settings = Settings()
_settings.ensure_data_dir()

huey = SqliteHuey(
    name="beamwatch",
    filename=str(_settings.huey_db_path),
    immediate=_settings.huey_immediate,
)

_db = Database(_settings.db_path)
_db.init_schema()

scheduler = AutomationScheduler(_db, _settings, huey=huey)
scheduler.start()


@huey.on_shutdown()  # type: ignore[untyped-decorator]
def _shutdown_scheduler() -> None:
    if scheduler.is_started:
        scheduler.stop()
    _db.close()


@huey.task()  # type: ignore[untyped-decorator]
def discover_competitors_task(website_id: int) -> dict[str, int | str]:
    """Run competitor discovery for one website.

    Returns the job id, its final status and the number of competitors stored.
    """
    from beamwatch.orchestrator import DiscoveryRunner

    settings = Settings()
    settings.ensure_data_dir()
    db = Database(settings.db_path)
    db.init_schema()

    try:
        runner = DiscoveryRunner(db=db, settings=settings)
        outcome = runner.run_discovery_sync(website_id)
        job = db.get_discovery_job(outcome.job_id)
        return {
            "job_id": outcome.job_id,
            "status": job.status.value if job else "unknown",
            "competitors_found": outcome.competitors_found,
        }
    finally:
        db.close()
