# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Probes for the load balancer / container orchestrator:
# - /health        process is up, reports environment and version
# - /health/live   liveness, never touches MongoDB
# - /health/ready  readiness, pings MongoDB and answers 503 while it is down
# =============================================================================

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from app.config import settings
from lib.mongo_client import MongoConnection

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


class DependencyCheck(BaseModel):
    """Result of probing one backing service."""
    healthy: bool
    latencyMs: float | None = None
    error: str | None = None


class ProbeResponse(BaseModel):
    status: str
    environment: str = settings.ENVIRONMENT
    version: str = API_VERSION
    checks: dict[str, DependencyCheck] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


async def _check_mongodb() -> DependencyCheck:
    started = time.perf_counter()
    try:
        await MongoConnection.ping()
    except Exception as e:
        logger.warning(f"Readiness: MongoDB ping failed: {e}")
        return DependencyCheck(healthy=False, error=str(e)[:120])
    return DependencyCheck(
        healthy=True,
        latencyMs=round((time.perf_counter() - started) * 1000, 2),
    )


@router.get("/health", response_model=ProbeResponse)
async def health_check():
    return ProbeResponse(status="healthy")


@router.get("/health/live", response_model=ProbeResponse)
async def liveness_check():
    return ProbeResponse(status="alive")


@router.get("/health/ready", response_model=ProbeResponse)
async def readiness_check(response: Response):
    """Ready only when MongoDB answers a ping."""
    mongodb = await _check_mongodb()
    if not mongodb.healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ProbeResponse(
        status="ready" if mongodb.healthy else "unavailable",
        checks={"mongodb": mongodb},
    )
