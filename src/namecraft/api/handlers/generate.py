"""Name generation endpoint handler."""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from namecraft.api.deps import GatewayDep, HistoryDep, RequestIdDep
from namecraft.core.gateway import parse_generation_request
from namecraft.core.normalizer import normalize_payload
from namecraft.models.generation import GenerationResult
from namecraft.utils.errors import ErrorResponse, InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()

UNREADABLE_BODY_MESSAGE = "Failed to process request"


@router.post(
    "/api/generate",
    response_model=list[GenerationResult],
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        408: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_names(
    request: Request,
    gateway: GatewayDep,
    history: HistoryDep,
    request_id: RequestIdDep,
) -> list[GenerationResult]:
    """Generate names or usernames through the upstream service.

    The body is validated, forwarded upstream once, and the upstream payload
    is normalized into a list of results in upstream order. Failures are
    raised as GenerationError subclasses and rendered by the app's
    exception handler.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError(UNREADABLE_BODY_MESSAGE) from e

    generation_request = parse_generation_request(payload)

    raw_payload = await gateway.fetch(generation_request)
    results = normalize_payload(raw_payload, generation_request.kind)

    logger.info(
        f"Generated {len(results)} results",
        extra={"kind": generation_request.kind, "request_id": request_id},
    )

    if history is not None:
        try:
            history.add(generation_request, results)
        except Exception:
            logger.exception("Failed to save generation to history")

    return results
