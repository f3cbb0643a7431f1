"""UI-thread hand-off and paced list rendering.

Only the thread that drains a UIDispatcher may touch the display. Background
threads call ``submit`` and the curses loop calls ``drain`` once per tick.
RenderScheduler builds on that: it clears the list in one UI turn and then
feeds rows in small batches, sleeping between them, so the loop can still
read keys while thousands of rows are painted.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Sequence
from typing import Protocol

from ...constants import RENDER_BATCH_DELAY_S, RENDER_BATCH_SIZE
from .formatting import format_entity_row, format_status_line
from .state import clamp_selection
from .types import ConsoleSnapshot, Entity, LogSink

logger = logging.getLogger("osiris")


class ListSurface(Protocol):
    """The display operations the scheduler needs (UI thread only)."""

    def clear(self) -> None: ...

    def append_row(self, text: str, *, alert: bool) -> None: ...

    def set_selection(self, index: int) -> None: ...

    def set_status(self, text: str, level: str) -> None: ...


class UIDispatcher:
    """Thread-safe queue of closures run by the UI owner."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self._owner: int | None = None

    def submit(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    def drain(self, max_items: int | None = None) -> int:
        """Run queued closures on the calling thread. Returns how many ran."""
        self._owner = threading.get_ident()
        ran = 0
        while max_items is None or ran < max_items:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                break
            fn()
            ran += 1
        return ran

    def on_ui_thread(self) -> bool:
        return self._owner == threading.get_ident()


def plan_batches(total: int, batch_size: int) -> list[range]:
    """Split ``total`` rows into consecutive index ranges of ``batch_size``."""
    return [range(start, min(start + batch_size, total)) for start in range(0, total, batch_size)]


class RenderScheduler:
    """Paints snapshots onto a ListSurface in paced batches.

    Each render() bumps a generation counter; batches queued by an older
    render see the mismatch and do nothing, so overlapping renders never
    interleave rows.

    ``selection`` reads the live cursor. When given, the last batch restores
    that index instead of the one in the snapshot, so cursor moves made while
    rows were still painting are kept.
    """

    def __init__(
        self,
        surface: ListSurface,
        dispatcher: UIDispatcher,
        *,
        selection: Callable[[], int] | None = None,
        batch_size: int = RENDER_BATCH_SIZE,
        batch_delay_s: float = RENDER_BATCH_DELAY_S,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
        log: LogSink | None = None,
    ) -> None:
        self.surface = surface
        self.dispatcher = dispatcher
        self.selection = selection
        self.batch_size = batch_size
        self.batch_delay_s = batch_delay_s
        self.clock = clock
        self.sleep = sleep
        self.log = log or logger.debug
        self._lock = threading.Lock()
        self._generation = 0
        self._rendered_cycle = 0

    def _next_generation(self, cycle: int) -> int:
        with self._lock:
            self._generation += 1
            self._rendered_cycle = max(self._rendered_cycle, cycle)
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _is_stale(self, cycle: int) -> bool:
        with self._lock:
            return cycle < self._rendered_cycle

    def render_status(self, snapshot: ConsoleSnapshot) -> None:
        """Update only the status line.

        Dropped when the snapshot predates the last rendered refresh cycle,
        checked on submit and again on the UI thread.
        """
        if self._is_stale(snapshot.cycle):
            return
        text, level = format_status_line(snapshot, now=self.clock())

        def update() -> None:
            if self._is_stale(snapshot.cycle):
                return
            self.surface.set_status(text, level)

        self.dispatcher.submit(update)

    def render(self, snapshot: ConsoleSnapshot) -> threading.Thread | None:
        """Repaint the list from a snapshot.

        Returns:
            The pacer thread feeding row batches, or None when there are no rows
        """
        generation = self._next_generation(snapshot.cycle)
        text, level = format_status_line(snapshot, now=self.clock())
        entities = snapshot.entities

        def reset() -> None:
            if not self._is_current(generation):
                return
            self.surface.clear()
            self.surface.set_status(text, level)

        self.dispatcher.submit(reset)
        if not entities:
            return None

        self.log(f"render: populating {len(entities)} entities (chunked)")
        pacer = threading.Thread(
            target=self._pace,
            args=(generation, entities, snapshot.selected_index),
            name="osiris-render",
            daemon=True,
        )
        pacer.start()
        return pacer

    def _pace(self, generation: int, entities: Sequence[Entity], selected: int) -> None:
        batches = plan_batches(len(entities), self.batch_size)
        for number, rows in enumerate(batches, start=1):
            if not self._is_current(generation):
                return
            is_last = number == len(batches)
            self.dispatcher.submit(
                self._make_batch(generation, entities, rows, selected if is_last else None)
            )
            self.sleep(self.batch_delay_s)

    def _make_batch(
        self,
        generation: int,
        entities: Sequence[Entity],
        rows: range,
        selected: int | None,
    ) -> Callable[[], None]:
        def paint() -> None:
            if not self._is_current(generation):
                return
            for idx in rows:
                entity = entities[idx]
                self.surface.append_row(format_entity_row(entity), alert=entity.has_alert)
            if selected is not None:
                index = self.selection() if self.selection is not None else selected
                self.surface.set_selection(clamp_selection(index, len(entities)))

        return paint
