"""Osiris command implementations."""

from __future__ import annotations

from .console import cmd_console, cmd_list

__all__ = [
    "cmd_console",
    "cmd_list",
]
