"""Refresh orchestration: timer, single-flight fetch, background correlation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import TYPE_CHECKING

from ...constants import HEARTBEAT_INTERVAL_S
from ...utils import run_detached
from .correlator import IncidentCorrelator
from .fetcher import fetch_entities
from .state import SharedState
from .types import ConsoleSnapshot, EntitySet, LogSink, Trigger

if TYPE_CHECKING:
    from ...config import Config

logger = logging.getLogger("osiris")

Fetcher = Callable[["Config"], EntitySet]


def _log_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error("background refresh work failed", exc_info=error)


class RefreshCoordinator:
    """Fetch, publish, then correlate in the background.

    State machine per cycle: Idle -> Fetching -> Published (correlating in
    background) -> Idle. A trigger that arrives while a fetch is running is
    dropped. The correlator works on a private copy of the fetched set and
    its result is only published if no newer cycle has been published.
    """

    def __init__(
        self,
        config: Config,
        state: SharedState,
        *,
        on_change: Callable[[ConsoleSnapshot], None],
        on_status: Callable[[ConsoleSnapshot], None] | None = None,
        fetcher: Fetcher | None = None,
        correlator: IncidentCorrelator | None = None,
        log: LogSink | None = None,
    ) -> None:
        self.config = config
        self.state = state
        self.on_change = on_change
        self.on_status = on_status
        self.log = log or logger.debug
        self.fetcher = fetcher or (lambda cfg: fetch_entities(cfg, log=self.log))
        self.correlator = correlator or IncidentCorrelator(log=self.log)
        self._stop = threading.Event()
        self._timer: threading.Thread | None = None

    def refresh(self, trigger: Trigger) -> bool:
        """Run one refresh cycle on the calling thread.

        Returns:
            False if another refresh was already in progress, True otherwise
        """
        if not self.state.try_begin_refresh():
            self.log(f"refresh ({trigger.value}) skipped: already in progress")
            return False

        self.log(f"refresh ({trigger.value}) started")
        if self.on_status is not None:
            self.on_status(self.state.snapshot())

        try:
            entity_set = self.fetcher(self.config)
        except Exception as e:
            # fetch_entities never raises; this guards injected fetchers
            self.state.abandon_refresh(f"Refresh failed: {e}")
            self.on_change(self.state.snapshot())
            raise

        cycle = self.state.publish_raw(entity_set)
        self.log(f"refresh ({trigger.value}) published {len(entity_set)} entities (cycle {cycle})")
        self.on_change(self.state.snapshot())

        if entity_set.entities:
            self.log(f"launching async correlation for {len(entity_set)} entities")
            future = run_detached(
                self._correlate_cycle, cycle, entity_set.clone(), name="osiris-correlate"
            )
            future.add_done_callback(_log_failure)
        return True

    def _correlate_cycle(self, cycle: int, working: EntitySet) -> None:
        matched = self.correlator.correlate(self.config, working)
        if self.state.publish_correlated(cycle, working):
            self.log(f"correlation for cycle {cycle} done ({matched} matches), queuing render")
            self.on_change(self.state.snapshot())
        else:
            self.log(f"correlation for cycle {cycle} superseded, dropped")

    def trigger_manual(self) -> Future:
        """Run a refresh on a background thread (returns immediately)."""
        future = run_detached(self.refresh, Trigger.MANUAL, name="osiris-refresh")
        future.add_done_callback(_log_failure)
        return future

    def start(self) -> None:
        """Refresh now and then every ``config.refresh_interval`` seconds."""
        if self._timer is not None:
            return
        self._timer = threading.Thread(target=self._run_timer, name="osiris-timer", daemon=True)
        self._timer.start()

    def _run_timer(self) -> None:
        interval = max(self.config.refresh_interval, 1)
        while not self._stop.is_set():
            try:
                self.refresh(Trigger.TIMER)
            except Exception:
                logger.exception("timer refresh failed")
            if self._stop.wait(interval):
                break

    def stop(self) -> None:
        """Stop the timer. Background work still in flight is abandoned."""
        self._stop.set()


def start_heartbeat(
    log: LogSink,
    stop: threading.Event,
    *,
    interval_s: float = HEARTBEAT_INTERVAL_S,
) -> threading.Thread:
    """Log ``heartbeat`` periodically until ``stop`` is set (helps spot hangs)."""

    def beat() -> None:
        while not stop.is_set():
            log("heartbeat")
            stop.wait(interval_s)

    thread = threading.Thread(target=beat, name="osiris-heartbeat", daemon=True)
    thread.start()
    return thread
