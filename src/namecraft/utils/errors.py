"""Error taxonomy and helpers for consistent error responses."""

import logging
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Upstream errors
    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """HTTP error response model."""

    error: str
    code: ErrorCode | None = None
    request_id: str | None = None


# User-friendly error messages by error code
USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Missing required parameters",
    ErrorCode.TIMEOUT: "Request timed out. Please try again.",
    ErrorCode.CONNECTION_ERROR: "Failed to connect to name generation service",
    ErrorCode.UPSTREAM_ERROR: "The name generation service returned an error",
    ErrorCode.MALFORMED_RESPONSE: "There was an error parsing the API response.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
}

# Default message for unknown errors
DEFAULT_USER_MESSAGE = "Failed to generate names"

# Maximum length for error details
MAX_ERROR_LENGTH = 500


class GenerationError(Exception):
    """Base class for every failure surfaced by a generation request.

    Attributes:
        code: Error code for the failure kind.
        status_code: HTTP status returned to the caller.
        message: Human-readable message returned to the caller.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str | None = None):
        self.message = message or get_user_message(self.code)
        super().__init__(self.message)


class InvalidRequestError(GenerationError):
    """Request fields are missing or malformed. Never reaches the network."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class UpstreamTimeoutError(GenerationError, TimeoutError):
    """The upstream did not respond before the deadline."""

    code = ErrorCode.TIMEOUT
    status_code = 408


class UpstreamConnectionError(GenerationError, ConnectionError):
    """Transport-level failure talking to the upstream."""

    code = ErrorCode.CONNECTION_ERROR
    status_code = 500


class UpstreamError(GenerationError):
    """The upstream answered with a non-2xx status.

    The HTTP status returned to the caller is the upstream status, verbatim.
    """

    code = ErrorCode.UPSTREAM_ERROR

    def __init__(self, upstream_status: int, message: str | None = None):
        self.upstream_status = upstream_status
        self.status_code = upstream_status
        super().__init__(message or f"API request failed with status {upstream_status}")


class MalformedUpstreamError(GenerationError):
    """The upstream payload could not be turned into a result list."""

    code = ErrorCode.MALFORMED_RESPONSE
    status_code = 500


def get_user_message(code: ErrorCode | None, default: str | None = None) -> str:
    """Get user-appropriate error message for an error code.

    Args:
        code: The error code.
        default: Default message if code not found.

    Returns:
        User-friendly error message.
    """
    if code is None:
        return default or DEFAULT_USER_MESSAGE

    return USER_MESSAGES.get(code, default or DEFAULT_USER_MESSAGE)


def truncate_error(error: str, max_length: int = MAX_ERROR_LENGTH) -> str:
    """Truncate error message if too long.

    Args:
        error: The error message.
        max_length: Maximum allowed length.

    Returns:
        Truncated error message.
    """
    if len(error) <= max_length:
        return error

    return error[: max_length - 3] + "..."


def create_error_response(
    code: ErrorCode,
    detail: str | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        code: The error code.
        detail: Optional custom message.
        request_id: Optional request ID.

    Returns:
        ErrorResponse model.
    """
    message = detail if detail else get_user_message(code)
    return ErrorResponse(
        error=truncate_error(message),
        code=code,
        request_id=request_id,
    )


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception to an error code.

    Args:
        exc: The exception to classify.

    Returns:
        Appropriate error code.
    """
    if isinstance(exc, GenerationError):
        return exc.code

    if isinstance(exc, ValidationError):
        return ErrorCode.VALIDATION_ERROR

    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorCode.UPSTREAM_ERROR

    # Timeouts are checked before transport errors; httpx timeouts are both
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCode.TIMEOUT

    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ErrorCode.CONNECTION_ERROR

    return ErrorCode.INTERNAL_ERROR


def log_error(
    exc: Exception,
    code: ErrorCode | None = None,
    request_id: str | None = None,
    **context: Any,
) -> None:
    """Log an error with context.

    Args:
        exc: The exception that occurred.
        code: Optional pre-classified error code.
        request_id: Optional request ID.
        **context: Additional context to include in log.
    """
    if code is None:
        code = classify_exception(exc)

    log_extra = {
        "error_code": code.value,
        "error_type": type(exc).__name__,
        "request_id": request_id,
        **context,
    }

    # Error level for user-facing errors, exception level for internal errors
    if code == ErrorCode.INTERNAL_ERROR:
        logger.exception("Internal error occurred", extra=log_extra)
    else:
        logger.error(f"Request error: {exc}", extra=log_extra)
