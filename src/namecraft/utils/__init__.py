"""Utility functions for error handling."""

from namecraft.utils.errors import (
    ErrorCode,
    ErrorResponse,
    GenerationError,
    InvalidRequestError,
    MalformedUpstreamError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
    classify_exception,
    create_error_response,
    log_error,
)

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "GenerationError",
    "InvalidRequestError",
    "MalformedUpstreamError",
    "UpstreamConnectionError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "classify_exception",
    "create_error_response",
    "log_error",
]
