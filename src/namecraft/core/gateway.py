"""Outbound gateway to the name generation service."""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from namecraft.config import Settings
from namecraft.models.generation import GenerationRequest
from namecraft.utils.errors import (
    InvalidRequestError,
    MalformedUpstreamError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

UPSTREAM_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def parse_generation_request(payload: Any) -> GenerationRequest:
    """Validate a decoded request body.

    Args:
        payload: Decoded JSON body.

    Returns:
        The validated GenerationRequest.

    Raises:
        InvalidRequestError: If the body is not an object or a field is invalid.
    """
    if isinstance(payload, GenerationRequest):
        return payload

    if not isinstance(payload, Mapping):
        raise InvalidRequestError()

    try:
        return GenerationRequest.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        logger.info(f"Rejected generation request, invalid fields: {fields}")
        raise InvalidRequestError() from e


def build_query_params(request: GenerationRequest) -> list[tuple[str, str]]:
    """Build the upstream query string parameters, in order.

    ``theme`` and ``purpose`` are only included when non-empty.
    """
    params = [
        ("type", request.kind),
        ("count", str(request.count)),
        ("platform", request.upstream_platform),
    ]

    if request.theme:
        params.append(("theme", request.theme))

    if request.purpose:
        params.append(("purpose", request.purpose))

    return params


class UpstreamGateway:
    """Forwards generation requests to the upstream service.

    Each call opens its own client, so calls share no state. A call runs
    under a hard deadline; on expiry the in-flight request is cancelled and
    its connection released.

    Args:
        base_url: Upstream endpoint.
        timeout_seconds: Deadline for a single call.
        transport: Optional httpx transport, used to stub the upstream.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "UpstreamGateway":
        """Create a gateway from application settings."""
        return cls(
            base_url=settings.upstream.base_url,
            timeout_seconds=settings.upstream.timeout_seconds,
            transport=transport,
        )

    async def fetch(self, request: GenerationRequest | Mapping[str, Any]) -> Any:
        """Send one generation request upstream and return its raw JSON payload.

        Validation happens first; an invalid request never reaches the network.
        No retries are attempted.

        Args:
            request: A GenerationRequest, or a decoded body to validate.

        Returns:
            The decoded upstream JSON payload, unmodified.

        Raises:
            InvalidRequestError: Request failed validation.
            UpstreamTimeoutError: Upstream did not answer before the deadline.
            UpstreamConnectionError: Any other network failure, redirect loops included.
            UpstreamError: Upstream answered with a non-2xx status.
            MalformedUpstreamError: Upstream answered 2xx with a non-JSON body.
        """
        generation_request = parse_generation_request(request)
        params = build_query_params(generation_request)

        logger.debug(
            f"Calling upstream (timeout={self.timeout_seconds}s)",
            extra={"kind": generation_request.kind},
        )

        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._get(params),
                timeout=self.timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                f"Upstream timed out after {self.timeout_seconds}s",
                extra={"kind": generation_request.kind},
            )
            raise UpstreamTimeoutError() from e
        except httpx.RequestError as e:
            logger.warning(f"Upstream connection failed: {type(e).__name__}: {e}")
            raise UpstreamConnectionError() from e

        duration_ms = int((time.perf_counter() - start_time) * 1000)

        if not response.is_success:
            logger.warning(
                f"Upstream returned status {response.status_code}",
                extra={"upstream_status": response.status_code, "duration_ms": duration_ms},
            )
            raise UpstreamError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("Upstream returned a non-JSON body")
            raise MalformedUpstreamError() from e

        logger.info(
            "Upstream call completed",
            extra={
                "kind": generation_request.kind,
                "upstream_status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return payload

    async def _get(self, params: list[tuple[str, str]]) -> httpx.Response:
        """Issue the GET request; the client is closed on every exit path."""
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout_seconds,
            follow_redirects=True,
        ) as client:
            return await client.get(self.base_url, params=params, headers=UPSTREAM_HEADERS)
