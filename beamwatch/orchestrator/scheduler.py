"""Automation scheduler: the three recurring batch jobs and their huey wiring.

One ``AutomationScheduler`` owns the job registry. ``start()`` registers each
job as a huey periodic task, ``stop()`` unregisters them, and ``status()``
reports what is scheduled and what is running. Every batch walks its items
with per-item isolation and holds a non-blocking lock for its job type, so a
tick that arrives while the previous run is still going is rejected instead of
doubling the work.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog
from huey import crontab

from beamwatch.errors import BatchAlreadyRunningError, SchedulerStateError
from beamwatch.metrics import batch_items_total
from beamwatch.models.automation import BatchResult, JobStatus
from beamwatch.models.report import EmailStatus
from beamwatch.notifications import EmailNotifier
from beamwatch.reports import (
    compile_monthly_report,
    render_renewal_html,
    render_report_html,
    report_subject,
)
from beamwatch.scoring import assess_website

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from huey import Huey

    from beamwatch.config import Settings
    from beamwatch.db import Database
    from beamwatch.orchestrator.runner import DiscoveryRunner
    from beamwatch.protocols import EmailSender

logger = structlog.get_logger()

WEEKLY_REFRESH = "weekly_refresh"
MONTHLY_REPORTS = "monthly_reports"
RENEWAL_REMINDERS = "renewal_reminders"

RENEWAL_SUBJECT = "Your BEAM subscription renews soon"


def parse_cron(expression: str) -> dict[str, str]:
    """Split a five-field cron expression into huey ``crontab`` keyword args."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Expected 5 cron fields, got {len(fields)}: {expression!r}")
    minute, hour, day, month, day_of_week = fields
    return {
        "minute": minute,
        "hour": hour,
        "day": day,
        "month": month,
        "day_of_week": day_of_week,
    }


@dataclass
class ScheduledJob:
    name: str
    cron: str
    handler: Callable[[], Awaitable[BatchResult]]
    lock: threading.Lock = field(default_factory=threading.Lock)
    task: Any = None
    last_result: BatchResult | None = None


class AutomationScheduler:
    def __init__(
        self,
        db: Database,
        settings: Settings,
        huey: Huey | None = None,
        runner: DiscoveryRunner | None = None,
        notifier: EmailSender | None = None,
    ) -> None:
        self.db = db
        self.settings = settings
        self.huey = huey

        if runner is None:
            from beamwatch.orchestrator.runner import DiscoveryRunner

            runner = DiscoveryRunner(db, settings)
        self.runner = runner
        self.notifier = notifier or EmailNotifier(settings)

        self._started = False
        self._jobs: dict[str, ScheduledJob] = {
            WEEKLY_REFRESH: ScheduledJob(
                WEEKLY_REFRESH, settings.weekly_refresh_cron, self.run_weekly_refresh
            ),
            MONTHLY_REPORTS: ScheduledJob(
                MONTHLY_REPORTS, settings.monthly_reports_cron, self.run_monthly_reports
            ),
            RENEWAL_REMINDERS: ScheduledJob(
                RENEWAL_REMINDERS, settings.renewal_reminders_cron, self.run_renewal_reminders
            ),
        }

    # --- Lifecycle ---

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Register every job as a huey periodic task.

        Raises:
            SchedulerStateError: Already started, or no huey instance attached.
        """
        if self._started:
            raise SchedulerStateError("Scheduler is already started")
        if self.huey is None:
            raise SchedulerStateError("No task queue attached to the scheduler")

        for job in self._jobs.values():
            job.task = self.huey.periodic_task(
                crontab(**parse_cron(job.cron)),
                name=f"beamwatch.{job.name}",
            )(self._make_tick(job.name))
            logger.info("Scheduled job registered", job=job.name, cron=job.cron)
        self._started = True

    def stop(self) -> None:
        """Unregister the periodic tasks. Batches already running are not interrupted."""
        if not self._started:
            raise SchedulerStateError("Scheduler is not started")
        for job in self._jobs.values():
            if job.task is not None:
                job.task.unregister()
                job.task = None
        self._started = False
        logger.info("Scheduler stopped")

    def status(self) -> list[JobStatus]:
        return [
            JobStatus(
                name=job.name,
                cron=job.cron,
                scheduled=job.task is not None,
                running=job.lock.locked(),
                last_result=job.last_result,
            )
            for job in self._jobs.values()
        ]

    def run_job(self, name: str) -> BatchResult | None:
        """Run one job to completion in the calling thread.

        Returns None without running when the same job is already in progress.
        """
        if name not in self._jobs:
            raise ValueError(f"Unknown job {name!r}")
        logger.info("Scheduled job triggered", job=name)
        try:
            return asyncio.run(self._jobs[name].handler())
        except BatchAlreadyRunningError:
            logger.warning("Previous run still in progress, skipping", job=name)
            return None

    def _make_tick(self, name: str) -> Callable[[], BatchResult | None]:
        def tick() -> BatchResult | None:
            return self.run_job(name)

        tick.__name__ = name
        return tick

    def _acquire(self, name: str) -> ScheduledJob:
        job = self._jobs[name]
        if not job.lock.acquire(blocking=False):
            raise BatchAlreadyRunningError(name)
        return job

    def _finish(
        self, job: ScheduledJob, started: datetime, success: int, errors: int
    ) -> BatchResult:
        result = BatchResult(
            job=job.name,
            success_count=success,
            error_count=errors,
            started_at=started,
            finished_at=datetime.now(UTC),
        )
        job.last_result = result
        logger.info(
            "Batch finished",
            job=job.name,
            success_count=success,
            error_count=errors,
        )
        return result

    # --- Batches ---

    async def run_weekly_refresh(self) -> BatchResult:
        """Re-run discovery and assessment for every active website."""
        job = self._acquire(WEEKLY_REFRESH)
        try:
            started = datetime.now(UTC)
            success = errors = 0
            websites = self.db.list_active_websites()
            logger.info("Weekly refresh started", websites=len(websites))
            for website in websites:
                assert website.id is not None
                try:
                    await self.runner.run_discovery(website.id)
                    assess_website(self.db, website.id)
                    self.db.touch_website(website.id)
                except Exception:
                    errors += 1
                    batch_items_total.labels(job=WEEKLY_REFRESH, outcome="error").inc()
                    logger.exception("Weekly refresh failed for website", website_id=website.id)
                else:
                    success += 1
                    batch_items_total.labels(job=WEEKLY_REFRESH, outcome="success").inc()
            return self._finish(job, started, success, errors)
        finally:
            job.lock.release()

    async def run_monthly_reports(self, now: datetime | None = None) -> BatchResult:
        """Compile, store and e-mail this month's report for every active website.

        A report whose e-mail could not be delivered is stored with status
        ``failed`` and counts as an error.
        """
        job = self._acquire(MONTHLY_REPORTS)
        try:
            started = datetime.now(UTC)
            now = now or started
            success = errors = 0
            for website in self.db.list_active_websites():
                assert website.id is not None
                try:
                    report = self.db.upsert_monthly_report(
                        compile_monthly_report(self.db, website.id, now=now)
                    )
                    assert report.id is not None
                    sent = await asyncio.to_thread(
                        self.notifier.send,
                        website.owner_email,
                        report_subject(website, report),
                        render_report_html(website, report),
                    )
                    self.db.mark_report_email(
                        report.id, EmailStatus.SENT if sent else EmailStatus.FAILED
                    )
                    if not sent:
                        raise RuntimeError(f"Report e-mail not delivered for website {website.id}")
                except Exception:
                    errors += 1
                    batch_items_total.labels(job=MONTHLY_REPORTS, outcome="error").inc()
                    logger.exception("Monthly report failed for website", website_id=website.id)
                else:
                    success += 1
                    batch_items_total.labels(job=MONTHLY_REPORTS, outcome="success").inc()
            return self._finish(job, started, success, errors)
        finally:
            job.lock.release()

    async def run_renewal_reminders(self, now: datetime | None = None) -> BatchResult:
        """E-mail owners whose subscription renews within the reminder window."""
        job = self._acquire(RENEWAL_REMINDERS)
        try:
            started = datetime.now(UTC)
            now = now or started
            until = now + timedelta(days=self.settings.reminder_window_days)
            success = errors = 0
            for subscription in self.db.list_renewing_subscriptions(now, until):
                try:
                    sent = await asyncio.to_thread(
                        self.notifier.send,
                        subscription["email"],
                        RENEWAL_SUBJECT,
                        render_renewal_html(
                            subscription["owner_name"], subscription["renewal_date"]
                        ),
                    )
                    if not sent:
                        raise RuntimeError(
                            f"Renewal reminder not delivered for subscription {subscription['id']}"
                        )
                except Exception:
                    errors += 1
                    batch_items_total.labels(job=RENEWAL_REMINDERS, outcome="error").inc()
                    logger.exception(
                        "Renewal reminder failed", subscription_id=subscription["id"]
                    )
                else:
                    success += 1
                    batch_items_total.labels(job=RENEWAL_REMINDERS, outcome="success").inc()
            return self._finish(job, started, success, errors)
        finally:
            job.lock.release()
