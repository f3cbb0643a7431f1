"""Shared types and constants for the console module."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace

LogSink = Callable[[str], None]


class Trigger(enum.Enum):
    """What started a refresh cycle."""

    TIMER = "timer"
    MANUAL = "manual"


@dataclass
class Entity:
    """One monitored host as shown in a console row.

    Attributes:
        name: Display name, also used for legacy name matching
        guid: New Relic entity GUID ("" when unknown)
        kind: Entity type reported by New Relic (e.g. "HOST")
        has_alert: Whether an open alert was correlated to this host
        alert_title: Alert condition / incident title
        alert_detail: Free-text alert details
        address: Connection target for SSH/RDP (defaults to name)
    """

    name: str
    guid: str = ""
    kind: str = "HOST"
    has_alert: bool = False
    alert_title: str = ""
    alert_detail: str = ""
    address: str = ""

    def __post_init__(self) -> None:
        if not self.address:
            self.address = self.name

    def copy(self) -> Entity:
        return replace(self)

    def mark_alert(self, title: str, detail: str) -> None:
        """Record a correlated alert. Later matches overwrite earlier ones."""
        self.has_alert = True
        if title:
            self.alert_title = title
        self.alert_detail = detail


@dataclass
class EntitySet:
    """Ordered entities from one fetch plus the reason for any degradation."""

    entities: list[Entity] = field(default_factory=list)
    error: str = ""

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)

    def names(self) -> list[str]:
        return [entity.name for entity in self.entities]

    def clone(self) -> EntitySet:
        """Return a value copy that shares no Entity objects with this set."""
        return EntitySet(entities=[entity.copy() for entity in self.entities], error=self.error)


@dataclass
class RefreshState:
    """Refresh bookkeeping guarded by SharedState's lock."""

    entities: EntitySet = field(default_factory=EntitySet)
    last_refresh_time: float | None = None
    in_progress: bool = False
    last_error: str = ""


@dataclass
class SelectionState:
    """Cursor and search position guarded by SharedState's lock."""

    selected_index: int = -1
    search_query: str = ""
    last_search_index: int = -1


@dataclass(frozen=True)
class ConsoleSnapshot:
    """Point-in-time copy of SharedState handed to the render scheduler."""

    entities: tuple[Entity, ...]
    selected_index: int
    in_progress: bool
    last_error: str
    last_refresh_time: float | None
    cycle: int = 0


def synthetic_entities(error: str) -> EntitySet:
    """Return the fixed offline dataset, tagged with why live data is missing."""
    return EntitySet(
        entities=[
            Entity(name="server-1"),
            Entity(
                name="server-2",
                has_alert=True,
                alert_title="CPU High",
                alert_detail="CPU > 85%",
            ),
            Entity(name="server-3"),
            Entity(
                name="server-4",
                has_alert=True,
                alert_title="Memory",
                alert_detail="Memory > 90%",
            ),
            Entity(name="server-5"),
        ],
        error=error,
    )


OSIRIS_BANNER = [
    "  ___  ___ ___ ___ ___ ___ ",
    " / _ \\/ __|_ _| _ \\_ _/ __|",
    "| (_) \\__ \\| ||   /| |\\__ \\",
    " \\___/|___/___|_|_\\___|___/",
]


HELP_TEXT = """\
Key Guide (press any key to close)

Keybindings:
  ↑/↓ or j/k  Move selection
  PgUp/PgDn   Move selection a page at a time
  space       Refresh now
  /           Search host names (case-insensitive)
  n           Jump to next search match
  s           SSH to selected host
  r           RDP to selected host
  ?           Show this help
  q           Quit

Rows:
NAME      Host name as reported by New Relic
STATUS    OK, or ALERT when an open incident/violation matches the host

Status line:
  Fetching...      a refresh is running
  Error: ...       live data unavailable, showing offline sample hosts
  Last updated     seconds since the last successful fetch
"""
