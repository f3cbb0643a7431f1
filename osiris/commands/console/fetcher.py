"""Entity fetching from NerdGraph with offline fallback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...constants import FETCH_TIMEOUT_S
from ...exceptions import DecodeError, NerdGraphError, TransportError
from ...newrelic import NewRelicClient
from .types import Entity, EntitySet, LogSink, synthetic_entities

if TYPE_CHECKING:
    from ...config import Config

logger = logging.getLogger("osiris")


def entity_search_query(account_id: str) -> str:
    """Build the NerdGraph query listing infrastructure hosts for an account."""
    search = "domain = 'INFRA' AND type = 'HOST'"
    if account_id.isdigit():
        search += f" AND accountId = {account_id}"
    return f"""{{
  actor {{
    entitySearch(query: "{search}") {{
      results {{
        entities {{
          guid
          name
          entityType
        }}
      }}
    }}
  }}
}}"""


def parse_entity_search(payload: dict[str, Any]) -> list[Entity]:
    """Extract entities from an entitySearch response.

    Any level of the envelope that is missing or has the wrong type yields
    an empty list. Rows without a name are skipped.
    """
    node: Any = payload
    for key in ("data", "actor", "entitySearch", "results", "entities"):
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    if not isinstance(node, list):
        return []

    entities = []
    for row in node:
        if not isinstance(row, dict):
            continue
        name = row.get("name")
        if not isinstance(name, str) or not name:
            continue
        guid = row.get("guid")
        kind = row.get("entityType")
        entities.append(
            Entity(
                name=name,
                guid=guid if isinstance(guid, str) else "",
                kind=kind if isinstance(kind, str) else "",
            )
        )
    return entities


def fetch_entities(
    config: Config,
    *,
    client: NewRelicClient | None = None,
    log: LogSink | None = None,
) -> EntitySet:
    """Fetch host entities; never raises.

    Every failure (missing credentials, network error or timeout, malformed
    body, GraphQL errors) returns the synthetic dataset with ``error`` set,
    so the console always has rows to show.
    """
    log = log or logger.debug

    if not config.has_credentials:
        message = "API key or account ID not configured"
        log(f"Fetch skipped: {message}")
        return synthetic_entities(message)

    if client is None:
        client = NewRelicClient(config.api_key)

    log("Fetching entities from New Relic")
    try:
        payload = client.graphql(entity_search_query(config.account_id), timeout=FETCH_TIMEOUT_S)
    except TransportError as e:
        log(f"Fetch failed: {e}")
        return synthetic_entities(f"Error fetching from New Relic: {e}")
    except DecodeError as e:
        log(f"JSON parse failed: {e}")
        return synthetic_entities(f"Error parsing response: {e}")
    except NerdGraphError as e:
        log(f"GraphQL error: {e}")
        return synthetic_entities(f"New Relic API error: {e}")

    if not isinstance(payload.get("data"), dict):
        log("Response carried no data object")
        return synthetic_entities("Error parsing response: no data returned")

    entities = parse_entity_search(payload)
    log(f"Found {len(entities)} entities")
    return EntitySet(entities=entities)
