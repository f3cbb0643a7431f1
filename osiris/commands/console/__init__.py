"""Osiris console command implementation.

This package provides the console command with clear separation of concerns:

- types.py: Entity model, shared constants and type definitions
- fetcher.py: Host entity fetch from NerdGraph with offline fallback
- correlator.py: Alert correlation fallback chain
- state.py: Lock-guarded shared state
- coordinator.py: Timer/manual refresh orchestration
- scheduler.py: UI-thread dispatcher and paced rendering
- search.py: Cyclic name search
- formatting.py: Text rendering (no curses dependencies)
- display.py: Curses-based interactive UI
- entry.py: Command entry points and orchestration
"""

from __future__ import annotations

from .coordinator import RefreshCoordinator, start_heartbeat
from .correlator import (
    IncidentCandidate,
    IncidentCorrelator,
    apply_violations,
    extract_incident_candidates,
    names_match,
)
from .display import ConsoleDisplay
from .entry import cmd_console, cmd_list
from .fetcher import fetch_entities
from .formatting import format_entity_row, format_status_line, render_entity_table
from .scheduler import RenderScheduler, UIDispatcher
from .search import find_next
from .state import SharedState, clamp_selection
from .types import ConsoleSnapshot, Entity, EntitySet, Trigger, synthetic_entities

__all__ = [
    "ConsoleDisplay",
    "ConsoleSnapshot",
    "Entity",
    "EntitySet",
    "IncidentCandidate",
    "IncidentCorrelator",
    "RefreshCoordinator",
    "RenderScheduler",
    "SharedState",
    "Trigger",
    "UIDispatcher",
    "apply_violations",
    "clamp_selection",
    "cmd_console",
    "cmd_list",
    "extract_incident_candidates",
    "fetch_entities",
    "find_next",
    "format_entity_row",
    "format_status_line",
    "names_match",
    "render_entity_table",
    "start_heartbeat",
    "synthetic_entities",
]
