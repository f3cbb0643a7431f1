"""Curses color initialization and attribute management for the console display."""

from __future__ import annotations

from curses import error as curses_error
from dataclasses import dataclass

from .formatting import STATUS_BUSY, STATUS_EMPTY, STATUS_ERROR, STATUS_OK

# Color pair numbers
PAIR_TITLE = 1
PAIR_OK = 2
PAIR_ALERT = 3
PAIR_BUSY = 4
PAIR_POPUP = 5
PAIR_BANNER = 6


@dataclass
class CursesAttrs:
    """Named curses attributes for consistent styling.

    Attributes:
        title_attr: Attribute for the title line
        ok_attr: Attribute for healthy rows and the "updated" status
        alert_attr: Attribute for alerting rows and error status
        busy_attr: Attribute for in-progress status
        popup_attr: Attribute for the help popup body
        banner_attr: Attribute for the help popup banner
    """

    title_attr: int
    ok_attr: int
    alert_attr: int
    busy_attr: int
    popup_attr: int
    banner_attr: int


class CursesColors:
    """Curses color initialization and attribute lookup.

    Falls back to plain attributes (bold/reverse) when the terminal has no
    color support.
    """

    def __init__(self, stdscr) -> None:
        self.stdscr = stdscr
        self.curses_mod = None
        self.color_enabled = False
        self.attrs = CursesAttrs(
            title_attr=0,
            ok_attr=0,
            alert_attr=0,
            busy_attr=0,
            popup_attr=0,
            banner_attr=0,
        )
        self._init_curses()

    def _init_curses(self) -> None:
        """Initialize curses with color support and feature detection."""
        try:
            import curses

            self.curses_mod = curses
            curses.curs_set(0)
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                curses.init_pair(PAIR_TITLE, curses.COLOR_CYAN, -1)
                curses.init_pair(PAIR_OK, curses.COLOR_GREEN, -1)
                curses.init_pair(PAIR_ALERT, curses.COLOR_RED, -1)
                curses.init_pair(PAIR_BUSY, curses.COLOR_YELLOW, -1)
                curses.init_pair(PAIR_POPUP, curses.COLOR_WHITE, curses.COLOR_BLACK)
                curses.init_pair(PAIR_BANNER, curses.COLOR_YELLOW, curses.COLOR_BLACK)
                self.color_enabled = True
            color = curses.color_pair if self.color_enabled else (lambda _pair: 0)
            self.attrs = CursesAttrs(
                title_attr=curses.A_BOLD | color(PAIR_TITLE),
                ok_attr=color(PAIR_OK),
                alert_attr=curses.A_BOLD | color(PAIR_ALERT),
                busy_attr=color(PAIR_BUSY),
                popup_attr=color(PAIR_POPUP) if self.color_enabled else curses.A_REVERSE,
                banner_attr=color(PAIR_BANNER) if self.color_enabled else curses.A_REVERSE,
            )
        except curses_error:
            return

    def status_attr(self, level: str) -> int:
        """Attribute for a status line of the given level."""
        if level == STATUS_ERROR:
            return self.attrs.alert_attr
        if level in (STATUS_BUSY, STATUS_EMPTY):
            return self.attrs.busy_attr
        if level == STATUS_OK:
            return self.attrs.ok_attr
        return 0

    def row_attr(self, *, alert: bool) -> int:
        return self.attrs.alert_attr if alert else self.attrs.ok_attr
