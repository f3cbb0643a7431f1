"""Config file loading.

The config file is a flat ``key=value`` file, by default ``~/.osiris/config``:

    api_key=NRAK-...
    account_id=1234567
    refresh_interval=30
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .constants import CONFIG_ENV_VAR, DEFAULT_REFRESH_INTERVAL_S, DEFAULT_SESSION_USER
from .exceptions import ConfigError
from .utils import default_config_path, parse_kv_lines

logger = logging.getLogger("osiris")


@dataclass
class Config:
    """Resolved runtime configuration."""

    api_key: str = ""
    account_id: str = ""
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL_S
    ssh_user: str = DEFAULT_SESSION_USER
    rdp_user: str = DEFAULT_SESSION_USER

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.account_id)


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Pick the config file path.

    Looks in this order:
    1. Explicit path argument (``--config``)
    2. File path from the OSIRIS_CONFIG environment variable
    3. ~/.osiris/config
    """
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return default_config_path()


def parse_refresh_interval(value: str) -> int | None:
    """Return a positive refresh interval, or None if the value is unusable."""
    try:
        interval = int(value)
    except ValueError:
        return None
    if interval < 1:
        return None
    return interval


def load_config(path: str | Path | None = None) -> Config:
    """Load config from file.

    A missing file is not an error: defaults are returned and the console
    reports the missing credentials in its status line.

    Raises:
        ConfigError: If the file exists but cannot be read
    """
    cfg = Config()
    config_path = resolve_config_path(path)
    logger.debug("Loading config from: %s", config_path)

    if not config_path.exists():
        logger.debug("Config not found at: %s", config_path)
        return cfg

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    values = parse_kv_lines(content)

    if "api_key" in values:
        cfg.api_key = values["api_key"]
    if "account_id" in values:
        cfg.account_id = values["account_id"]
    if "refresh_interval" in values:
        interval = parse_refresh_interval(values["refresh_interval"])
        if interval is None:
            logger.warning(
                "Ignoring invalid refresh_interval %r in %s",
                values["refresh_interval"],
                config_path,
            )
        else:
            cfg.refresh_interval = interval
    if values.get("ssh_user"):
        cfg.ssh_user = values["ssh_user"]
    if values.get("rdp_user"):
        cfg.rdp_user = values["rdp_user"]

    logger.debug("API key set: %s", bool(cfg.api_key))
    logger.debug("Account ID set: %s", bool(cfg.account_id))
    return cfg
