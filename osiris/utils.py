"""Osiris utility functions."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future
from pathlib import Path
from typing import Any, TypeVar

from .constants import CONFIG_FILE_NAME, DEBUG_LOG_FILE_NAME, OSIRIS_DIR_NAME

T = TypeVar("T")


def osiris_dir() -> Path:
    """Return the per-user Osiris state directory (~/.osiris)."""
    home = Path(os.path.expanduser("~"))
    return home / OSIRIS_DIR_NAME


def default_config_path() -> Path:
    """Return default path for the config file."""
    return osiris_dir() / CONFIG_FILE_NAME


def default_debug_log_path() -> Path:
    """Return default path for the debug log file."""
    return osiris_dir() / DEBUG_LOG_FILE_NAME


def ensure_parent_dir(p: Path) -> None:
    """Create parent directory of path if it doesn't exist."""
    p.parent.mkdir(parents=True, exist_ok=True)


def parse_kv_lines(output: str) -> dict[str, str]:
    """Parse key=value lines from string output.

    Blank lines and lines starting with ``#`` are skipped. Only the first
    ``=`` splits, so values may contain ``=`` themselves.
    """
    d: dict[str, str] = {}
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" in stripped:
            k, v = stripped.split("=", 1)
            d[k.strip()] = v.strip()
    return d


def format_elapsed_time(seconds: float) -> str:
    """Format elapsed time in human-readable format.

    Args:
        seconds: Elapsed time in seconds

    Returns:
        Formatted string like "1m25s", "45s", or "1h05m30s"
    """
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def run_detached(fn: Callable[..., T], *args: Any, name: str | None = None) -> Future[T]:
    """Run fn(*args) on a daemon thread and return a Future for its result.

    The thread is a daemon, so work abandoned by the caller does not block
    interpreter exit.
    """
    future: Future[T] = Future()

    def runner() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    threading.Thread(target=runner, name=name, daemon=True).start()
    return future
