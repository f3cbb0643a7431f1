"""Curses-based UI display for the console command."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from curses import error as curses_error
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import TYPE_CHECKING, Any

from ...constants import SESSION_REDRAW_DELAY_S, SESSION_RESTORE_DELAY_S
from ...exceptions import OsirisError
from ...session import build_rdp_command, build_ssh_command, run_interactive
from .curses_colors import CursesColors
from .formatting import clip_cell, format_details, help_lines

if TYPE_CHECKING:
    from ...config import Config
    from .scheduler import UIDispatcher
    from .state import SharedState

TITLE = "Osiris - New Relic Incident Console"
KEY_HINTS = "space:refresh  /:search  s:ssh  r:rdp  ?:help  q:quit"
SEARCH_PROMPT = "Search: "
SEARCH_MAX_CHARS = 64

# Title + status line above the list; separator + 4 detail lines below it
HEADER_ROWS = 2
DETAILS_ROWS = 5


class ConsoleDisplay:
    """Curses list surface plus key handling.

    The ListSurface methods (clear/append_row/set_selection/set_status) are
    called from closures drained on the UI thread; they only update in-memory
    rows and mark the screen dirty. The curses loop calls draw_screen when
    ``dirty`` is set.
    """

    def __init__(
        self,
        stdscr,
        *,
        state: SharedState,
        dispatcher: UIDispatcher,
        config: Config,
        on_refresh: Callable[[], Any] | None = None,
        launcher: Callable[[list[str]], int] = run_interactive,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.stdscr = stdscr
        self.state = state
        self.dispatcher = dispatcher
        self.config = config
        self.on_refresh = on_refresh
        self.launcher = launcher
        self.sleep = sleep
        self.rows: list[tuple[str, bool]] = []
        self.status_text = ""
        self.status_level = ""
        self.selected = -1
        self.offset = 0
        self.page_step = 1
        self.message = ""
        self.show_help = False
        self.dirty = True
        self.colors = CursesColors(stdscr)
        self.curses_mod = self.colors.curses_mod

    def safe_addstr(self, row: int, col: int, text: str, attr: int = 0) -> None:
        try:
            if attr:
                self.stdscr.addstr(row, col, text, attr)
            else:
                self.stdscr.addstr(row, col, text)
        except curses_error:
            return

    # ListSurface

    def clear(self) -> None:
        self.rows = []
        self.dirty = True

    def append_row(self, text: str, *, alert: bool) -> None:
        self.rows.append((text, alert))
        self.dirty = True

    def set_selection(self, index: int) -> None:
        # Highlight and shared cursor must name the same host for s/r
        self.selected = self.state.select(index)
        self.dirty = True

    def set_status(self, text: str, level: str) -> None:
        self.status_text = text
        self.status_level = level
        self.dirty = True

    # Input

    def handle_key(self, key: int) -> bool:
        """Handle a keypress. Returns True if we should exit.

        Args:
            key: The key code from getch()
        """
        if key == -1:
            return False

        # Any key closes the help popup (except '?' which opens it)
        if self.show_help:
            if key != ord("?"):
                self.show_help = False
                self.dirty = True
            return False

        if key in (ord("q"), ord("Q")):
            return True
        if not self.curses_mod:
            return False

        self.message = ""
        self.dirty = True
        if key == ord("?"):
            self.show_help = True
        elif key in (self.curses_mod.KEY_UP, ord("k")):
            self.move_selection(-1)
        elif key in (self.curses_mod.KEY_DOWN, ord("j")):
            self.move_selection(1)
        elif key == self.curses_mod.KEY_PPAGE:
            self.move_selection(-self.page_step)
        elif key == self.curses_mod.KEY_NPAGE:
            self.move_selection(self.page_step)
        elif key == ord(" "):
            if self.on_refresh is not None:
                self.on_refresh()
        elif key == ord("/"):
            self.start_search(self.prompt(SEARCH_PROMPT))
        elif key == ord("n"):
            self.next_match()
        elif key == ord("s"):
            self.launch_session("ssh")
        elif key == ord("r"):
            self.launch_session("rdp")
        return False

    def move_selection(self, delta: int) -> None:
        self.selected = self.state.select(self.selected + delta)

    def start_search(self, query: str) -> None:
        if not query:
            return
        self.state.start_search(query)
        self.next_match()

    def next_match(self) -> None:
        query = self.state.search_query
        if not query:
            self.message = "No active search (press /)"
            return
        found = self.state.next_match()
        if found is None:
            self.message = f"No match for '{query}'"
            return
        self.selected = found

    def prompt(self, label: str) -> str:
        """Read a line of input on the bottom row (blocking)."""
        if not self.curses_mod:
            return ""
        height, width = self.stdscr.getmaxyx()
        row = max(height - 1, 0)
        self.safe_addstr(row, 0, " " * max(width - 1, 0))
        self.safe_addstr(row, 0, label)
        self.stdscr.refresh()
        self._set_cursor(1)
        self.curses_mod.echo()
        self.stdscr.nodelay(False)
        self.stdscr.timeout(-1)
        try:
            raw = self.stdscr.getstr(row, len(label), SEARCH_MAX_CHARS)
        except curses_error:
            raw = b""
        finally:
            self.curses_mod.noecho()
            self._set_cursor(0)
            self.stdscr.nodelay(True)
            self.stdscr.timeout(200)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", "replace")
        return raw.strip()

    def _set_cursor(self, visibility: int) -> None:
        try:
            self.curses_mod.curs_set(visibility)
        except curses_error:
            return

    # Sessions

    def launch_session(self, kind: str) -> None:
        """Suspend curses, run ssh/rdp against the selected host, then restore."""
        entity = self.state.selected_entity()
        if entity is None:
            self.message = "No host selected"
            return
        if kind == "ssh":
            cmd = build_ssh_command(entity.address, self.config.ssh_user)
        else:
            cmd = build_rdp_command(entity.address, self.config.rdp_user)

        self.curses_mod.def_prog_mode()
        self.curses_mod.endwin()
        try:
            rc = self.launcher(cmd)
            if rc != 0:
                self.message = f"{kind} to {entity.name} exited with {rc}"
        except OsirisError as e:
            self.message = str(e)
        finally:
            self.sleep(SESSION_RESTORE_DELAY_S)
            self.curses_mod.reset_prog_mode()
            self.curses_mod.flushinp()
            self.stdscr.refresh()
            self.schedule_redraw(SESSION_REDRAW_DELAY_S)

    def schedule_redraw(self, delay_s: float) -> None:
        """Queue a full repaint on the UI thread after delay_s."""

        def redraw() -> None:
            self.stdscr.clear()
            self.dirty = True

        timer = threading.Timer(delay_s, lambda: self.dispatcher.submit(redraw))
        timer.daemon = True
        timer.start()

    # Drawing

    def _list_height(self, height: int) -> int:
        return max(height - HEADER_ROWS - DETAILS_ROWS, 1)

    def _scroll_to_selection(self, list_height: int) -> None:
        max_offset = max(len(self.rows) - list_height, 0)
        if 0 <= self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + list_height:
            self.offset = self.selected - list_height + 1
        self.offset = min(max(self.offset, 0), max_offset)

    def draw_screen(self) -> None:
        self.dirty = False
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()
        usable_width = max(width - 1, 0)
        attrs = self.colors.attrs

        title = f"{TITLE}  {self.message or KEY_HINTS}"
        self.safe_addstr(0, 0, clip_cell(title, usable_width).rstrip(), attrs.title_attr)
        self.safe_addstr(
            1,
            0,
            clip_cell(self.status_text, usable_width).rstrip(),
            self.colors.status_attr(self.status_level),
        )

        list_height = self._list_height(height)
        self.page_step = list_height
        self._scroll_to_selection(list_height)
        reverse = self.curses_mod.A_REVERSE if self.curses_mod else 0
        visible = self.rows[self.offset : self.offset + list_height]
        for idx, (text, alert) in enumerate(visible):
            row = idx + HEADER_ROWS
            if row >= height:
                break
            attr = self.colors.row_attr(alert=alert)
            if self.offset + idx == self.selected:
                attr |= reverse
            self.safe_addstr(row, 0, clip_cell(text, usable_width).rstrip(), attr)

        details_top = HEADER_ROWS + list_height
        if details_top < height:
            self.safe_addstr(details_top, 0, "-" * usable_width)
            entity = self.state.selected_entity()
            lines = format_details(entity)
            for offset, line in enumerate(lines[: DETAILS_ROWS - 1], start=1):
                attr = attrs.alert_attr if offset == 1 and entity and entity.has_alert else 0
                text = clip_cell(line, usable_width).rstrip()
                self.safe_addstr(details_top + offset, 0, text, attr)

        if self.show_help and self.curses_mod:
            self.stdscr.noutrefresh()
            self.draw_help()
            self.curses_mod.doupdate()
        else:
            self.stdscr.refresh()

    def draw_help(self) -> None:
        """Overlay the key guide in a bordered window centered on the screen."""
        height, width = self.stdscr.getmaxyx()
        lines = help_lines(_osiris_version())
        rows = min(len(lines), max(height - 2, 1))
        cols = min(len(lines[0][0]), max(width - 2, 1))
        top = max((height - rows - 2) // 2, 0)
        left = max((width - cols - 2) // 2, 0)
        try:
            win = self.curses_mod.newwin(rows + 2, cols + 2, top, left)
        except curses_error:
            return

        attrs = self.colors.attrs
        win.bkgd(" ", attrs.popup_attr)
        win.border()
        for row, (text, is_banner) in enumerate(lines[:rows], start=1):
            attr = attrs.banner_attr if is_banner else attrs.popup_attr
            try:
                win.addstr(row, 1, text[:cols], attr)
            except curses_error:
                continue
        win.noutrefresh()


def _osiris_version() -> str:
    try:
        return get_version("osiris")
    except PackageNotFoundError:
        return "?"
