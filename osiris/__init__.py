"""
Osiris - New Relic incident console for infrastructure hosts.

Design goals:
- One screen: every host, its alert status, and a key to SSH/RDP into it.
- Never blank: when New Relic is unreachable, sample hosts are shown with the reason.
- Best-effort alert matching, from exact entity GUIDs down to host-name overlap.
"""

from __future__ import annotations

from .cli import main
from .constants import DEFAULT_REFRESH_INTERVAL_S
from .exceptions import OsirisError, UserError

__all__ = [
    "DEFAULT_REFRESH_INTERVAL_S",
    "OsirisError",
    "UserError",
    "main",
]
