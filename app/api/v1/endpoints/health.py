"""Liveness and dependency status endpoints."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.core.redis_client import check_redis_connection
from app.database import check_database_connection

router = APIRouter()

ServiceState = Literal["healthy", "unhealthy", "disabled"]


class HealthResponse(BaseModel):
    """Service liveness."""

    status: Literal["healthy", "degraded"]
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Liveness plus the state of each backing service."""

    database: ServiceState
    cache: ServiceState
    mail: Literal["configured", "disabled"]


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """Report that the API process is up."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    summary="Database, cache and mail status",
)
async def detailed_health_check() -> DetailedHealthResponse:
    """
    Check the database and cache.

    The cache only counts against overall health when caching is enabled;
    missing mail settings never do, they only disable password reset mails.
    """
    database: ServiceState = "healthy" if await check_database_connection() else "unhealthy"

    cache: ServiceState = "disabled"
    if settings.cache_enabled:
        cache = "healthy" if await check_redis_connection() else "unhealthy"

    return DetailedHealthResponse(
        status="degraded" if "unhealthy" in (database, cache) else "healthy",
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        cache=cache,
        mail="configured" if settings.mail_enabled else "disabled",
    )


@router.get("/ping", summary="Simple ping")
async def ping() -> dict[str, str]:
    """Reply with pong."""
    return {"message": "pong"}
