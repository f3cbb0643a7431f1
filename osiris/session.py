"""Osiris interactive SSH/RDP session launching."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time

from .constants import WSL_MSTSC_PATH
from .exceptions import OsirisError
from .utils import format_elapsed_time

logger = logging.getLogger("osiris")


def build_ssh_command(address: str, user: str) -> list[str]:
    """Return argv for an interactive ssh session to user@address."""
    return ["ssh", f"{user}@{address}"]


def build_rdp_command(
    address: str,
    user: str,
    *,
    platform: str | None = None,
    mstsc_path: str = WSL_MSTSC_PATH,
) -> list[str]:
    """Return argv for an RDP client connecting to address.

    Windows uses mstsc directly. Elsewhere the Windows client is preferred
    when it is reachable (WSL), otherwise xfreerdp.
    """
    if platform is None:
        platform = sys.platform
    if platform.startswith("win"):
        return ["mstsc", f"/v:{address}"]
    if os.path.exists(mstsc_path):
        return [mstsc_path, f"/v:{address}"]
    return ["xfreerdp", f"/v:{address}", f"/u:{user}", "+clipboard"]


def run_interactive(cmd: list[str]) -> int:
    """
    Executes cmd attached to the current terminal.

    Returns the exit code. Does NOT raise on non-zero rc.
    """
    logger.debug("Session command: %s", " ".join(cmd))
    start_time = time.time()
    try:
        p = subprocess.run(cmd, check=False)
    except FileNotFoundError:
        raise OsirisError(f"{cmd[0]} binary not found on PATH.")

    elapsed = time.time() - start_time
    logger.debug("Session ended after %s (rc=%d)", format_elapsed_time(elapsed), p.returncode)
    return p.returncode
