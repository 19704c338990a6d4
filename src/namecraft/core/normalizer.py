"""Normalization of upstream payloads into a uniform result list.

The upstream service answers in one of two shapes: a JSON array of results,
or an object flagged with ``warning`` whose ``rawResponse.response`` holds the
array pre-serialized as a string. Everything here is pure: no I/O, no
mutation of the input payload.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from namecraft.models.generation import (
    DirectResponse,
    GenerationKind,
    GenerationResult,
    UpstreamResponse,
    WrappedResponse,
)
from namecraft.utils.errors import MalformedUpstreamError

logger = logging.getLogger(__name__)

WARNING_KEY = "warning"
RAW_RESPONSE_KEY = "rawResponse"
RAW_RESPONSE_BODY_KEY = "response"

# Fields a result is expected to carry for each kind
EXPECTED_FIELDS: dict[str, tuple[str, ...]] = {
    "both": ("name", "username"),
    "username": ("username",),
    "name": ("name",),
}

_results_adapter = TypeAdapter(list[GenerationResult])


def classify_payload(payload: Any) -> UpstreamResponse:
    """Decide which upstream shape a payload has.

    Args:
        payload: Decoded JSON returned by the upstream.

    Returns:
        WrappedResponse when the payload carries a truthy warning marker,
        DirectResponse otherwise.

    Raises:
        MalformedUpstreamError: If a warning-wrapped payload has no raw string.
    """
    if isinstance(payload, Mapping) and payload.get(WARNING_KEY):
        raw_response = payload.get(RAW_RESPONSE_KEY)
        raw = raw_response.get(RAW_RESPONSE_BODY_KEY) if isinstance(raw_response, Mapping) else None
        if not isinstance(raw, str):
            raise MalformedUpstreamError()
        return WrappedResponse(raw=raw)

    return DirectResponse(items=payload)


def normalize_payload(payload: Any, kind: GenerationKind) -> list[GenerationResult]:
    """Turn an upstream payload into an ordered list of results.

    Upstream order is preserved. Nothing is filtered, deduplicated or
    truncated. Items missing the fields expected for ``kind`` are kept.

    Args:
        payload: Decoded JSON returned by the upstream.
        kind: The kind that was requested.

    Returns:
        List of GenerationResult in upstream order.

    Raises:
        MalformedUpstreamError: If the wrapped string is not JSON, or the
            resolved payload is not an array of objects. Field values
            inside an object are never rejected.
    """
    response = classify_payload(payload)

    if isinstance(response, WrappedResponse):
        logger.warning("Upstream returned a warning-wrapped payload, re-parsing")
        try:
            items = json.loads(response.raw)
        except json.JSONDecodeError as e:
            raise MalformedUpstreamError() from e
    else:
        items = response.items

    if not isinstance(items, list):
        raise MalformedUpstreamError()

    try:
        results = _results_adapter.validate_python(items)
    except ValidationError as e:
        raise MalformedUpstreamError() from e

    incomplete = sum(1 for result in results if missing_fields(result, kind))
    if incomplete:
        logger.debug(
            f"{incomplete} of {len(results)} results lack fields expected for kind={kind}"
        )

    return results


def missing_fields(result: GenerationResult, kind: GenerationKind) -> list[str]:
    """List the fields expected for ``kind`` that a result does not carry."""
    return [field for field in EXPECTED_FIELDS[kind] if not getattr(result, field)]


def project_result(result: GenerationResult, kind: GenerationKind) -> dict[str, Any]:
    """Select the fields displayed for a result of the given kind.

    Missing fields project to None; nothing is rejected.
    """
    return {field: getattr(result, field) for field in EXPECTED_FIELDS[kind]}
