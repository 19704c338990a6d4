"""Generation history models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from namecraft.models.generation import GenerationRequest, GenerationResult


class HistoryEntry(BaseModel):
    """A past request together with its normalized results."""

    id: int
    timestamp: datetime
    params: GenerationRequest
    results: list[GenerationResult]


class HistoryEntryView(HistoryEntry):
    """History entry with a short projected preview for display."""

    preview: list[dict[str, Any]]


class HistoryResponse(BaseModel):
    """Response for the history listing endpoint."""

    entries: list[HistoryEntryView]
    capacity: int


class HistoryClearedResponse(BaseModel):
    """Response for the history clearing endpoint."""

    cleared: int
