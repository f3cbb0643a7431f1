"""Osiris constants."""

from __future__ import annotations

# Local state directory (~/.osiris)
OSIRIS_DIR_NAME = ".osiris"
CONFIG_FILE_NAME = "config"
DEBUG_LOG_FILE_NAME = "debug.log"
CONFIG_ENV_VAR = "OSIRIS_CONFIG"

# Config defaults
DEFAULT_REFRESH_INTERVAL_S = 30
DEFAULT_SESSION_USER = "admin"

# New Relic endpoints
NERDGRAPH_URL = "https://api.newrelic.com/graphql"
VIOLATIONS_URL = "https://api.newrelic.com/v2/alerts_violations.json"
USER_AGENT = "osiris"

# Timeouts (seconds)
FETCH_TIMEOUT_S = 10
CORRELATION_TIMEOUT_S = 12
LEGACY_FALLBACK_CEILING_S = 15

# NerdGraph accepts at most 25 guids per actor.entities() call
PROBE_GUID_CHUNK = 25

# Heuristic incident walker
MAX_WALK_DEPTH = 32

# Render pacing
RENDER_BATCH_SIZE = 25
RENDER_BATCH_DELAY_S = 0.025

# Post-session recovery
SESSION_RESTORE_DELAY_S = 0.1
SESSION_REDRAW_DELAY_S = 0.05

HEARTBEAT_INTERVAL_S = 5.0

# Windows RDP client as seen from WSL
WSL_MSTSC_PATH = "/mnt/c/Windows/System32/mstsc.exe"
