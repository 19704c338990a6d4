"""Health check endpoint handler."""

import asyncio
import logging
import time
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, Response

from namecraft import __version__
from namecraft.api.deps import SettingsDep
from namecraft.config import Settings
from namecraft.models.health import ComponentHealth, HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Thresholds for health status determination
LATENCY_DEGRADED_MS = 2000  # Above this is considered degraded


async def check_upstream_health(settings: Settings) -> ComponentHealth:
    """Check that the name generation service is reachable.

    Sends a HEAD request so no names are generated. Any answer below 500
    counts as reachable.

    Args:
        settings: Application settings.

    Returns:
        ComponentHealth indicating upstream status.
    """
    if not settings.health.upstream_check_enabled:
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Check disabled",
        )

    try:
        start_time = time.perf_counter()

        async with httpx.AsyncClient(timeout=settings.health.timeout_seconds) as client:
            response = await client.head(settings.upstream.base_url)

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        if response.status_code >= 500:
            return ComponentHealth(
                status=HealthStatus.UNHEALTHY,
                status_code=response.status_code,
                error=f"Upstream returned status {response.status_code}",
            )
        if latency_ms > LATENCY_DEGRADED_MS:
            return ComponentHealth(
                status=HealthStatus.DEGRADED,
                latency_ms=latency_ms,
                status_code=response.status_code,
                message="High latency detected",
            )
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            latency_ms=latency_ms,
            status_code=response.status_code,
        )

    except httpx.TimeoutException:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            error="Connection timeout",
        )
    except httpx.TransportError as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            error=f"Connection failed: {str(e)}",
        )
    except Exception as e:
        logger.exception("Unexpected error during upstream health check")
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            error=f"Unexpected error: {type(e).__name__}",
        )


def determine_overall_status(checks: dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health status from component checks.

    Args:
        checks: Dictionary of component health results.

    Returns:
        Overall health status.
    """
    if not checks:
        return HealthStatus.HEALTHY

    statuses = [check.status for check in checks.values()]

    if any(s == HealthStatus.UNHEALTHY for s in statuses):
        return HealthStatus.UNHEALTHY
    elif any(s == HealthStatus.DEGRADED for s in statuses):
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep, response: Response) -> HealthResponse:
    """Health check endpoint.

    - HTTP 200: Service is healthy or degraded
    - HTTP 503: Upstream is unreachable
    """
    try:
        upstream_check = await asyncio.wait_for(
            check_upstream_health(settings),
            timeout=settings.health.timeout_seconds,
        )
    except asyncio.TimeoutError:
        upstream_check = ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            error="Health check timeout",
        )

    checks = {"upstream": upstream_check}
    overall_status = determine_overall_status(checks)

    if overall_status == HealthStatus.UNHEALTHY:
        response.status_code = 503

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        upstream_url=settings.upstream.base_url,
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict:
    """Liveness probe - the process can accept requests."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(settings: SettingsDep, response: Response) -> HealthResponse:
    """Readiness probe - same as the main health check."""
    return await health_check(settings, response)
