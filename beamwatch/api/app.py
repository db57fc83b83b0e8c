"""FastAPI application factory and entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

from beamwatch import __version__
from beamwatch.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from beamwatch.api.routes import system, websites
from beamwatch.config import Settings
from beamwatch.db import Database
from beamwatch.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize DB and settings on startup, cleanup on shutdown."""
    settings = Settings()
    settings.ensure_data_dir()

    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        worker_id=settings.worker_id,
    )

    db = Database(settings.db_path)
    db.init_schema()

    app.state.db = db
    app.state.settings = settings

    logger.info("Beamwatch API started", host=settings.api_host, port=settings.api_port)
    yield

    db.close()
    logger.info("Beamwatch API shut down")


def create_app() -> FastAPI:
    """Application factory."""
    app = FastAPI(
        title="Beamwatch",
        description="Competitor discovery and threat scoring API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)

    # Prometheus metrics endpoint
    from prometheus_client import make_asgi_app

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    prefix = "/api/v1"
    app.include_router(system.router, prefix=prefix)
    app.include_router(websites.router, prefix=prefix)

    return app


def main() -> None:
    """Entry point for `beamwatch-api` command."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "beamwatch.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
