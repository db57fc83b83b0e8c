"""Click CLI entry point for Beamwatch."""

from __future__ import annotations

import sys

import click

from beamwatch.config import Settings
from beamwatch.db import Database
from beamwatch.errors import BeamwatchError
from beamwatch.logging import configure_logging
from beamwatch.orchestrator.scheduler import (
    MONTHLY_REPORTS,
    RENEWAL_REMINDERS,
    WEEKLY_REFRESH,
)


def _get_db(settings: Settings) -> Database:
    settings.ensure_data_dir()
    db = Database(settings.db_path)
    db.init_schema()
    return db


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Beamwatch: competitor discovery and threat scoring."""
    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings") or Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(
        log_level=log_level, log_format=settings.log_format, worker_id=settings.worker_id
    )
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""
    settings = ctx.obj["settings"]
    db = _get_db(settings)
    db.close()
    click.echo(f"Schema ready at {settings.db_path}")


@cli.command()
@click.argument("website_id", type=int)
@click.pass_context
def discover(ctx: click.Context, website_id: int) -> None:
    """Run competitor discovery for one website."""
    from beamwatch.orchestrator import DiscoveryRunner

    settings = ctx.obj["settings"]
    db = _get_db(settings)
    try:
        runner = DiscoveryRunner(db=db, settings=settings)
        outcome = runner.run_discovery_sync(website_id)
    except BeamwatchError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        db.close()

    click.echo(
        f"Job {outcome.job_id}: {outcome.candidates_found} candidates, "
        f"{outcome.competitors_found} competitors stored"
    )
    for c in outcome.competitors:
        click.echo(f"  {c.threat_score:3d} {c.threat_level.value:8s} {c.name} ({c.url})")


@cli.command()
@click.argument("website_id", type=int)
@click.pass_context
def assess(ctx: click.Context, website_id: int) -> None:
    """Compute and store the aggregate threat for one website."""
    from beamwatch.insights import summarize_threat
    from beamwatch.scoring import assess_website

    db = _get_db(ctx.obj["settings"])
    try:
        if db.get_website(website_id) is None:
            click.echo(f"Website {website_id} not found.", err=True)
            sys.exit(1)
        summary = summarize_threat(assess_website(db, website_id))
    finally:
        db.close()

    a = summary.assessment
    click.echo(f"Threat: {a.threat_level.value} ({a.threat_score}/100)")
    click.echo(f"  {summary.description}")
    click.echo(f"  Competitors: {a.competitor_count} (avg score {a.average_competitor_score})")
    click.echo(f"  Market saturation: {a.market_saturation.value}")
    click.echo(f"  AI search visibility: {a.ai_search_visibility.value}")
    if summary.recommendations:
        click.echo("\nRecommendations:")
        for r in summary.recommendations:
            click.echo(f"  [{r.priority.value}] {r.title}")


@cli.command()
@click.argument("website_id", type=int)
@click.pass_context
def status(ctx: click.Context, website_id: int) -> None:
    """Show the latest discovery job for one website."""
    db = _get_db(ctx.obj["settings"])
    try:
        job = db.latest_discovery_job(website_id)
    finally:
        db.close()

    if job is None:
        click.echo(f"No discovery jobs for website {website_id}.")
        return
    click.echo(f"Job {job.id}: {job.status.value}")
    click.echo(f"  Created: {job.created_at:%Y-%m-%d %H:%M:%S}")
    if job.completed_at:
        click.echo(f"  Completed: {job.completed_at:%Y-%m-%d %H:%M:%S}")
    click.echo(f"  Competitors found: {job.competitors_found}")
    if job.error_message:
        click.echo(f"  Error: {job.error_message}")


@cli.command()
@click.argument("website_id", type=int)
@click.option("--limit", default=10, type=int, help="Number of competitors to show")
@click.pass_context
def ranking(ctx: click.Context, website_id: int, limit: int) -> None:
    """List stored competitors by threat score."""
    from beamwatch.insights import rank_competitors

    db = _get_db(ctx.obj["settings"])
    try:
        ranked = rank_competitors(db, website_id, limit=limit)
    finally:
        db.close()

    if not ranked:
        click.echo("No competitors found.")
        return
    for r in ranked:
        score = "-" if r.threat_score is None else r.threat_score
        level = r.threat_level.value if r.threat_level else "-"
        click.echo(f"  {r.rank:2d}. {r.competitor_name} [{level} {score}] {r.competitor_url}")


@cli.group()
def batch() -> None:
    """Run a scheduled batch job once, in the foreground."""


def _run_batch(ctx: click.Context, job: str) -> None:
    from beamwatch.orchestrator import AutomationScheduler

    db = _get_db(ctx.obj["settings"])
    try:
        result = AutomationScheduler(db, ctx.obj["settings"]).run_job(job)
    finally:
        db.close()
    if result is None:
        click.echo(f"{job} is already running.", err=True)
        sys.exit(1)
    click.echo(f"{result.job}: {result.success_count} succeeded, {result.error_count} failed")


@batch.command("weekly-refresh")
@click.pass_context
def batch_weekly(ctx: click.Context) -> None:
    """Refresh discovery and threat for every active website."""
    _run_batch(ctx, WEEKLY_REFRESH)


@batch.command("monthly-reports")
@click.pass_context
def batch_monthly(ctx: click.Context) -> None:
    """Compile and e-mail this month's reports."""
    _run_batch(ctx, MONTHLY_REPORTS)


@batch.command("reminders")
@click.pass_context
def batch_reminders(ctx: click.Context) -> None:
    """E-mail upcoming subscription renewal reminders."""
    _run_batch(ctx, RENEWAL_REMINDERS)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Verify which external services are configured."""
    settings = ctx.obj["settings"]
    keys = {
        "Anthropic": bool(settings.anthropic_api_key),
        "Tavily": bool(settings.tavily_api_key),
        "SMTP": settings.smtp_configured,
    }
    for name, configured in keys.items():
        status = "OK" if configured else "-- not set"
        click.echo(f"  {name:16s} {status}")


@cli.command()
@click.option("--workers", default=None, type=int, help="Number of worker threads")
@click.pass_context
def worker(ctx: click.Context, workers: int | None) -> None:
    """Start the Huey consumer (runs the scheduled jobs and queued discoveries)."""
    from beamwatch.tasks import huey

    workers = workers or ctx.obj["settings"].huey_workers
    click.echo(f"Starting Huey consumer with {workers} workers...")
    consumer = huey.create_consumer(workers=workers, periodic=True)
    consumer.run()


@cli.group()
def enqueue() -> None:
    """Enqueue tasks to the worker queue."""


@enqueue.command("discover")
@click.argument("website_id", type=int)
def enqueue_discover(website_id: int) -> None:
    """Enqueue a discovery task for one website."""
    from beamwatch.tasks import discover_competitors_task

    result = discover_competitors_task(website_id)
    click.echo(f"Discovery task enqueued: {result}")


@cli.command()
@click.option("--host", type=str, default=None, help="Bind host")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the FastAPI API server."""
    import uvicorn

    settings = ctx.obj["settings"]
    uvicorn.run(
        "beamwatch.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
    )
