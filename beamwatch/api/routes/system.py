"""Health check and config endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from beamwatch import __version__
from beamwatch.api.deps import DbDep, SettingsDep
from beamwatch.api.schemas import ConfigCheckResponse, HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    db: DbDep,
) -> HealthResponse:
    try:
        db_ok = db.check_connection()
    except SQLAlchemyError:
        db_ok = False

    return HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        db_connected=db_ok,
    )


@router.get("/config/check", response_model=ConfigCheckResponse)
def config_check(
    settings: SettingsDep,
) -> ConfigCheckResponse:
    return ConfigCheckResponse(
        configured={
            "anthropic": bool(settings.anthropic_api_key),
            "tavily": bool(settings.tavily_api_key),
            "smtp": settings.smtp_configured,
        }
    )
