"""Models for the service health endpoints."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class HealthStatus(str, Enum):
    """Overall or per-check health."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Outcome of probing the name generation service.

    Attributes:
        status: Unhealthy on a 5xx answer or no answer, degraded when slow.
        latency_ms: Round trip of the HEAD probe, when one completed.
        status_code: HTTP status the upstream answered the probe with.
        error: Why the upstream is considered unreachable.
        message: Informational note, e.g. that the probe is disabled.
    """

    model_config = ConfigDict(use_enum_values=True)

    status: HealthStatus
    latency_ms: int | None = None
    status_code: int | None = None
    error: str | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    """Body of GET /health, keyed by check name ("upstream")."""

    model_config = ConfigDict(use_enum_values=True)

    status: HealthStatus
    version: str
    timestamp: datetime
    upstream_url: str
    checks: dict[str, ComponentHealth]
