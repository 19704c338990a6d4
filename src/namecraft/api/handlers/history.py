"""Generation history endpoint handlers."""

import logging

from fastapi import APIRouter

from namecraft.api.deps import HistoryDep
from namecraft.core.normalizer import project_result
from namecraft.models.history import (
    HistoryClearedResponse,
    HistoryEntry,
    HistoryEntryView,
    HistoryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Number of results shown per entry in the history listing
PREVIEW_SIZE = 4


def build_entry_view(entry: HistoryEntry) -> HistoryEntryView:
    """Attach a projected preview of the first results to an entry."""
    preview = [project_result(result, entry.params.kind) for result in entry.results[:PREVIEW_SIZE]]
    return HistoryEntryView(
        id=entry.id,
        timestamp=entry.timestamp,
        params=entry.params,
        results=entry.results,
        preview=preview,
    )


@router.get("/api/history", response_model=HistoryResponse)
async def list_history(history: HistoryDep) -> HistoryResponse:
    """List past generations, newest first.

    Returns an empty listing when history is disabled.
    """
    if history is None:
        return HistoryResponse(entries=[], capacity=0)

    entries = [build_entry_view(entry) for entry in history.entries()]
    logger.debug(f"Returning {len(entries)} history entries")

    return HistoryResponse(entries=entries, capacity=history.capacity)


@router.delete("/api/history", response_model=HistoryClearedResponse)
async def clear_history(history: HistoryDep) -> HistoryClearedResponse:
    """Remove every history entry."""
    if history is None:
        return HistoryClearedResponse(cleared=0)

    cleared = history.clear()
    logger.info(f"Cleared {cleared} history entries")

    return HistoryClearedResponse(cleared=cleared)
