"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class ConsoleArgs:
    """Arguments for console command."""

    config: str | None
    refresh_interval: int | None


@dataclass
class ListArgs:
    """Arguments for list command."""

    config: str | None
    json: bool
    no_correlate: bool
    refresh_interval: int | None = None


class HasConfigOptions(Protocol):
    """Protocol for args that carry config file options."""

    config: str | None
    refresh_interval: int | None
