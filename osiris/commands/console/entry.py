"""Console command entry points."""

from __future__ import annotations

import contextlib
import curses
import dataclasses
import json
import logging
import sys
import threading
import time
from collections.abc import Callable, Iterator
from curses import wrapper as curses_wrapper
from pathlib import Path
from typing import TYPE_CHECKING

from ...config import Config, load_config
from ...exceptions import UserError
from ...utils import default_debug_log_path, ensure_parent_dir
from .coordinator import RefreshCoordinator, start_heartbeat
from .correlator import IncidentCorrelator
from .display import ConsoleDisplay
from .fetcher import fetch_entities
from .formatting import render_entity_table
from .scheduler import RenderScheduler, UIDispatcher
from .state import SharedState

if TYPE_CHECKING:
    from ...cli_types import ConsoleArgs, HasConfigOptions, ListArgs

logger = logging.getLogger("osiris")

# How often the "Last updated N seconds ago" line is recomputed
STATUS_TICK_S = 1.0


def resolve_config(args: HasConfigOptions) -> Config:
    """Load the config file and apply command-line overrides."""
    config = load_config(args.config)
    if args.refresh_interval is not None:
        if args.refresh_interval < 1:
            raise UserError("--refresh-interval must be at least 1 second")
        config.refresh_interval = args.refresh_interval
    return config


@contextlib.contextmanager
def log_to_file(path: Path) -> Iterator[None]:
    """Send the osiris logger to path (at DEBUG) instead of the terminal."""
    ensure_parent_dir(path)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(threadName)s] %(levelname)s: %(message)s")
    )
    terminal_handlers = [
        h
        for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    previous_level = logger.level
    for h in terminal_handlers:
        logger.removeHandler(h)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield
    finally:
        logger.removeHandler(handler)
        handler.close()
        for h in terminal_handlers:
            logger.addHandler(h)
        logger.setLevel(previous_level)


def run_console(
    stdscr,
    config: Config,
    *,
    clock: Callable[[], float] = time.time,
) -> None:
    """Wire state, display, scheduler and coordinator, then run the key loop."""
    stdscr.nodelay(True)
    stdscr.timeout(200)

    state = SharedState(clock=clock)
    dispatcher = UIDispatcher()
    display = ConsoleDisplay(stdscr, state=state, dispatcher=dispatcher, config=config)
    scheduler = RenderScheduler(
        display,
        dispatcher,
        selection=lambda: state.selected_index,
        clock=clock,
    )
    coordinator = RefreshCoordinator(
        config,
        state,
        on_change=scheduler.render,
        on_status=scheduler.render_status,
    )
    display.on_refresh = coordinator.trigger_manual

    scheduler.render(state.snapshot())
    dispatcher.drain()
    display.draw_screen()
    coordinator.start()
    last_status = clock()
    try:
        while True:
            key = stdscr.getch()

            if display.handle_key(key):
                return

            # Drop queued key repeats so held arrows don't lag behind
            if key != -1:
                peek = stdscr.getch()
                if peek != -1:
                    curses.flushinp()

            dispatcher.drain()

            now = clock()
            if now - last_status >= STATUS_TICK_S:
                last_status = now
                scheduler.render_status(state.snapshot())

            if display.dirty:
                display.draw_screen()
    finally:
        coordinator.stop()


def cmd_console(args: ConsoleArgs) -> None:
    """Run the interactive console."""
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise UserError("console needs an interactive terminal; use 'osiris list' instead")

    config = resolve_config(args)
    log_path = default_debug_log_path()
    with log_to_file(log_path):
        logger.debug("=== Osiris starting ===")
        stop = threading.Event()
        start_heartbeat(logger.debug, stop)
        try:
            curses_wrapper(run_console, config)
        finally:
            stop.set()
            logger.debug("=== Osiris exiting ===")


def cmd_list(args: ListArgs) -> None:
    """Fetch (and correlate) once, then print a table or JSON."""
    config = resolve_config(args)
    entity_set = fetch_entities(config)
    if entity_set.error:
        print(f"WARNING: {entity_set.error}", file=sys.stderr)

    # Offline sample hosts already carry their alerts
    if not args.no_correlate and not entity_set.error:
        IncidentCorrelator().correlate(config, entity_set)

    if args.json:
        payload = {
            "error": entity_set.error,
            "entities": [dataclasses.asdict(entity) for entity in entity_set],
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return

    header, lines = render_entity_table(entity_set.entities)
    print(header)
    for line in lines:
        print(line)
