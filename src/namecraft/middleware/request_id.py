"""Request ID middleware for request tracing."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


def is_valid_uuid(value: str) -> bool:
    """Check if a string is a valid UUID."""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, TypeError, AttributeError):
        return False


def generate_request_id() -> str:
    """Generate a new UUID4 request ID."""
    return str(uuid.uuid4())


def resolve_request_id(header_value: str | None) -> str:
    """Reuse a client-supplied request ID if it is a UUID, else mint one."""
    if header_value and is_valid_uuid(header_value):
        return header_value
    return generate_request_id()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach an X-Request-ID to every request and response.

    The ID is stored in ``request.state.request_id`` so handlers, error
    responses and log lines can refer to the same value.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        return response
