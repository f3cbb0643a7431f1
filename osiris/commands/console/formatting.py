"""Text rendering for console rows, status line and details panel (no curses)."""

from __future__ import annotations

from collections.abc import Sequence

from .types import HELP_TEXT, OSIRIS_BANNER, ConsoleSnapshot, Entity

NAME_MIN_WIDTH = 15

STATUS_BUSY = "busy"
STATUS_ERROR = "error"
STATUS_EMPTY = "empty"
STATUS_OK = "ok"

# Blank columns either side of the help popup text
HELP_PAD_X = 2


def clip_cell(value: str, width: int) -> str:
    """Clip and pad a cell to width using ASCII ellipsis."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value.ljust(width)
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def entity_status(entity: Entity) -> str:
    return "ALERT" if entity.has_alert else "OK"


def format_entity_row(entity: Entity, *, name_width: int = NAME_MIN_WIDTH) -> str:
    """Render one list row, e.g. ``server-2        ALERT``."""
    return f"{entity.name:<{name_width}} {entity_status(entity)}"


def format_status_line(snapshot: ConsoleSnapshot, *, now: float) -> tuple[str, str]:
    """Return (text, level) for the status line.

    Priority: refresh in progress, then last error, then empty set, then
    time since the last refresh.
    """
    if snapshot.in_progress:
        return "⟳ Fetching from New Relic...", STATUS_BUSY
    if snapshot.last_error:
        return f"✗ Error: {snapshot.last_error}", STATUS_ERROR
    if not snapshot.entities:
        return "No entities found. Check API key and account ID.", STATUS_EMPTY
    if snapshot.last_refresh_time is None:
        return "⟳ Loading entities from New Relic...", STATUS_BUSY
    seconds_ago = max(int(now - snapshot.last_refresh_time), 0)
    return f"✓ Last updated: {seconds_ago} seconds ago", STATUS_OK


def format_details(entity: Entity | None) -> list[str]:
    """Lines for the details panel under the list."""
    if entity is None:
        return []
    if entity.has_alert:
        return [
            "ALERT",
            entity.alert_title,
            entity.alert_detail,
            "Press 's' for SSH or 'r' for RDP",
        ]
    return ["Status: OK", "No active alerts"]


def render_entity_table(
    entities: Sequence[Entity], *, col_sep: str = "  "
) -> tuple[str, list[str]]:
    """Render a plain-text table (header, lines) for non-interactive output."""
    name_width = max([len("NAME")] + [len(e.name) for e in entities])
    kind_width = max([len("TYPE")] + [len(e.kind) for e in entities])
    status_width = len("ALERT")

    header = col_sep.join(
        [
            clip_cell("NAME", name_width),
            clip_cell("TYPE", kind_width),
            clip_cell("STATUS", status_width + 1),
            "ALERT_TITLE",
        ]
    )
    lines = []
    for entity in entities:
        cells = [
            clip_cell(entity.name, name_width),
            clip_cell(entity.kind, kind_width),
            clip_cell(entity_status(entity), status_width + 1),
            entity.alert_title or "-",
        ]
        lines.append(col_sep.join(cells).rstrip())
    return header.rstrip(), lines


def help_lines(version: str) -> list[tuple[str, bool]]:
    """Popup body as (text, is_banner) pairs, padded to one common width.

    Banner lines are centered; the key guide is left-aligned below a blank line.
    """
    banner = OSIRIS_BANNER + [f"osiris v{version}"]
    guide = [""] + HELP_TEXT.strip().split("\n")
    width = max(len(line) for line in banner + guide)
    pad = " " * HELP_PAD_X
    lines = [(f"{pad}{line.center(width)}{pad}", True) for line in banner]
    lines.extend((f"{pad}{line.ljust(width)}{pad}", False) for line in guide)
    return lines
