"""Lock-guarded state shared by the UI loop and background refresh threads."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from .search import find_next
from .types import ConsoleSnapshot, Entity, EntitySet, RefreshState, SelectionState


def clamp_selection(index: int, total: int) -> int:
    """Clamp a selection into a set of ``total`` rows (-1 when empty, else 0 if out of range)."""
    if total <= 0:
        return -1
    if index < 0 or index >= total:
        return 0
    return index


class SharedState:
    """Single source of truth for the displayed entities, cursor and refresh status.

    Every method takes the one lock only for the copy or assignment it
    performs; nothing here does I/O while holding it.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self.refresh = RefreshState()
        self.selection = SelectionState()
        self._cycle = 0

    def try_begin_refresh(self) -> bool:
        """Claim the single refresh slot. Returns False if one is already running."""
        with self._lock:
            if self.refresh.in_progress:
                return False
            self.refresh.in_progress = True
            return True

    def abandon_refresh(self, error: str) -> None:
        """Release the refresh slot without publishing new entities."""
        with self._lock:
            self.refresh.in_progress = False
            self.refresh.last_error = error

    def publish_raw(self, entity_set: EntitySet) -> int:
        """Swap in a freshly fetched set and end the in-progress span.

        Returns:
            The cycle number identifying this publish
        """
        with self._lock:
            self._cycle += 1
            self.refresh.entities = entity_set
            self.refresh.last_error = entity_set.error
            self.refresh.last_refresh_time = self._clock()
            self.refresh.in_progress = False
            self._clamp_locked()
            return self._cycle

    def publish_correlated(self, cycle: int, entity_set: EntitySet) -> bool:
        """Replace the published set with its correlated copy.

        Dropped (returns False) when a newer cycle has been published since.
        """
        with self._lock:
            if cycle != self._cycle:
                return False
            self.refresh.entities = entity_set
            self._clamp_locked()
            return True

    def _clamp_locked(self) -> None:
        self.selection.selected_index = clamp_selection(
            self.selection.selected_index, len(self.refresh.entities)
        )

    def snapshot(self) -> ConsoleSnapshot:
        with self._lock:
            return ConsoleSnapshot(
                entities=tuple(self.refresh.entities.entities),
                selected_index=self.selection.selected_index,
                in_progress=self.refresh.in_progress,
                last_error=self.refresh.last_error,
                last_refresh_time=self.refresh.last_refresh_time,
                cycle=self._cycle,
            )

    def select(self, index: int) -> int:
        """Move the cursor, clamped to the published set. Returns the stored index."""
        with self._lock:
            total = len(self.refresh.entities)
            if total == 0:
                self.selection.selected_index = -1
            else:
                self.selection.selected_index = min(max(index, 0), total - 1)
            return self.selection.selected_index

    @property
    def selected_index(self) -> int:
        with self._lock:
            return self.selection.selected_index

    def selected_entity(self) -> Entity | None:
        with self._lock:
            idx = self.selection.selected_index
            entities = self.refresh.entities.entities
            if 0 <= idx < len(entities):
                return entities[idx]
            return None

    @property
    def search_query(self) -> str:
        with self._lock:
            return self.selection.search_query

    def start_search(self, query: str) -> None:
        """Enter a new query; the next match scan starts from index 0."""
        with self._lock:
            self.selection.search_query = query.strip()
            self.selection.last_search_index = -1

    def next_match(self) -> int | None:
        """Advance to the next entity matching the active query.

        On a match the cursor moves there too.
        """
        with self._lock:
            found = find_next(
                self.refresh.entities.names(),
                self.selection.search_query,
                self.selection.last_search_index,
            )
            if found is not None:
                self.selection.last_search_index = found
                self.selection.selected_index = found
            return found
