"""Bounded store of past generations."""

import logging
import time
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from namecraft.models.generation import GenerationRequest, GenerationResult
from namecraft.models.history import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 20


class HistoryStore(Protocol):
    """Store of history entries keyed by timestamp."""

    capacity: int

    def add(self, request: GenerationRequest, results: list[GenerationResult]) -> HistoryEntry: ...

    def entries(self) -> list[HistoryEntry]: ...

    def clear(self) -> int: ...


class InMemoryHistoryStore:
    """Process-local history store with FIFO eviction.

    Newest entries come first; once ``capacity`` is reached the oldest entry
    is dropped on every insert. No method awaits, so each call is atomic
    with respect to other requests on the event loop.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._last_id = 0

    def add(self, request: GenerationRequest, results: list[GenerationResult]) -> HistoryEntry:
        """Record a generation, evicting the oldest entry if full."""
        entry = HistoryEntry(
            id=self._next_id(),
            timestamp=datetime.now(timezone.utc),
            params=request,
            results=list(results),
        )
        if len(self._entries) == self.capacity:
            logger.debug(f"History full, evicting entry {self._entries[-1].id}")
        self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[HistoryEntry]:
        """Return entries, newest first."""
        return list(self._entries)

    def clear(self) -> int:
        """Remove every entry and return how many were removed."""
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def _next_id(self) -> int:
        # Millisecond timestamp, bumped so two entries never share a key
        entry_id = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = entry_id
        return entry_id
