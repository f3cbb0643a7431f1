"""Alert correlation: attach open incidents/violations to fetched entities.

Three stages are tried in order, each only when the previous one matched
nothing:

1. probe_incidents: typed NerdGraph query for per-entity incidents
2. discover_incidents: broad account query, walked for anything that looks
   like an incident carrying entity identifiers
3. legacy_violations: classic REST violations, matched by fuzzy host name
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...constants import (
    CORRELATION_TIMEOUT_S,
    LEGACY_FALLBACK_CEILING_S,
    MAX_WALK_DEPTH,
    PROBE_GUID_CHUNK,
)
from ...exceptions import NerdGraphError
from ...newrelic import NewRelicClient
from ...utils import chunked, run_detached
from .types import EntitySet, LogSink

if TYPE_CHECKING:
    from ...config import Config

logger = logging.getLogger("osiris")

TITLE_KEYS = ("title", "conditionName", "condition_name", "summary", "label")
DESCRIPTION_KEYS = ("description", "details", "detail", "message")
ID_KEYS = (
    "entityGuid",
    "entityGuids",
    "entity_guid",
    "guid",
    "targetGuid",
    "entityId",
    "entity_id",
)
NESTED_ID_KEYS = ("entities", "targets", "impactedEntities", "entity")


@dataclass(frozen=True)
class IncidentCandidate:
    """Something incident-shaped found while walking an untyped response."""

    title: str
    description: str
    identifiers: tuple[str, ...]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "; ".join(item for item in value if isinstance(item, str) and item)
    return ""


def _identifiers(value: Any) -> list[str]:
    if isinstance(value, bool):
        return []
    if isinstance(value, (str, int)):
        text = str(value)
        return [text] if text else []
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int)) and item != ""]
    return []


def _first_text(node: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        text = _text(node.get(key))
        if text:
            return text
    return ""


def _direct_ids(node: Mapping[str, Any]) -> list[str]:
    ids: list[str] = []
    for key in ID_KEYS:
        ids.extend(_identifiers(node.get(key)))
    return ids


def _candidate_from_mapping(node: Mapping[str, Any]) -> IncidentCandidate | None:
    title = _first_text(node, TITLE_KEYS)
    description = _first_text(node, DESCRIPTION_KEYS)
    if not title and not description:
        return None

    ids = _direct_ids(node)
    for key in NESTED_ID_KEYS:
        nested = node.get(key)
        if isinstance(nested, Mapping):
            ids.extend(_direct_ids(nested))
        elif isinstance(nested, list):
            for item in nested:
                if isinstance(item, Mapping):
                    ids.extend(_direct_ids(item))
    if not ids:
        return None

    # Keep first-seen order, drop repeats
    unique = tuple(dict.fromkeys(ids))
    return IncidentCandidate(title=title, description=description, identifiers=unique)


def extract_incident_candidates(
    payload: Any, *, max_depth: int = MAX_WALK_DEPTH
) -> list[IncidentCandidate]:
    """Walk an arbitrary JSON value depth-first and collect incident candidates.

    Mappings with a title- or description-like key plus at least one entity
    identifier (directly, or on objects in a sibling list such as
    ``entities``/``targets``) become candidates. Nodes deeper than
    ``max_depth`` are ignored.
    """
    candidates: list[IncidentCandidate] = []

    def walk(node: Any, depth: int) -> None:
        if depth > max_depth:
            return
        if isinstance(node, Mapping):
            candidate = _candidate_from_mapping(node)
            if candidate is not None:
                candidates.append(candidate)
            for value in node.values():
                walk(value, depth + 1)
        elif isinstance(node, (list, tuple)):
            for item in node:
                walk(item, depth + 1)

    walk(payload, 0)
    return candidates


def apply_candidates(entity_set: EntitySet, candidates: list[IncidentCandidate]) -> int:
    """Mark entities whose guid equals one of a candidate's identifiers."""
    by_guid: dict[str, list] = {}
    for entity in entity_set:
        if entity.guid:
            by_guid.setdefault(entity.guid, []).append(entity)

    matched = 0
    for candidate in candidates:
        for identifier in candidate.identifiers:
            for entity in by_guid.get(identifier, ()):
                entity.mark_alert(candidate.title, candidate.description)
                matched += 1
    return matched


def names_match(entity_name: str, target_name: str) -> bool:
    """Case-insensitive substring match in either direction; empty never matches."""
    a = entity_name.lower()
    b = target_name.lower()
    if not a or not b:
        return False
    return a in b or b in a


def extract_violation_targets(violation: Mapping[str, Any]) -> list[str]:
    """Collect candidate host names from a REST violation object."""
    names: list[str] = []

    targets = violation.get("targets")
    if isinstance(targets, list):
        for target in targets:
            if isinstance(target, Mapping) and isinstance(target.get("name"), str):
                names.append(target["name"])

    links = violation.get("links")
    if isinstance(links, Mapping) and isinstance(links.get("entity"), str):
        names.append(links["entity"])

    if isinstance(violation.get("entity_name"), str):
        names.append(violation["entity_name"])

    entity = violation.get("entity")
    if isinstance(entity, Mapping) and isinstance(entity.get("name"), str):
        names.append(entity["name"])

    return [name for name in names if name]


def apply_violations(entity_set: EntitySet, violations: list[Any], *, log: LogSink) -> int:
    """Match violations to entities by name.

    Deliberately loose: one violation may mark several entities whose names
    overlap, and a later violation overwrites an earlier one's text.
    """
    matched = 0
    for violation in violations:
        if not isinstance(violation, Mapping):
            continue
        title = _text(violation.get("condition_name"))
        details = _text(violation.get("details"))
        for target in extract_violation_targets(violation):
            for entity in entity_set:
                if names_match(entity.name, target):
                    entity.mark_alert(title, details)
                    log(f"Matched REST violation to {entity.name} via name '{target}'")
                    matched += 1
    return matched


def probe_query(guids: list[str]) -> str:
    guid_list = ", ".join(f'"{guid}"' for guid in guids)
    return f"""{{
  actor {{
    entities(guids: [{guid_list}]) {{
      guid
      name
      entityType
      incidents {{
        title
        description
        severity
      }}
    }}
  }}
}}"""


def discovery_query(account_id: str) -> str:
    return f"""{{
  actor {{
    account(id: {account_id}) {{
      aiIssues {{
        issues(filter: {{states: [ACTIVATED, CREATED]}}) {{
          issues {{
            issueId
            title
            description
            priority
            state
            entityGuids
            entityNames
          }}
        }}
      }}
    }}
  }}
}}"""


def parse_probe_response(payload: Mapping[str, Any]) -> list[IncidentCandidate]:
    """Typed parse of a probe response: data.actor.entities[].incidents[]."""
    data = payload.get("data")
    actor = data.get("actor") if isinstance(data, Mapping) else None
    rows = actor.get("entities") if isinstance(actor, Mapping) else None
    if not isinstance(rows, list):
        return []

    incidents = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        guid = row.get("guid")
        row_incidents = row.get("incidents")
        if not isinstance(guid, str) or not guid or not isinstance(row_incidents, list):
            continue
        for incident in row_incidents:
            if not isinstance(incident, Mapping):
                continue
            incidents.append(
                IncidentCandidate(
                    title=_text(incident.get("title")),
                    description=_text(incident.get("description")),
                    identifiers=(guid,),
                )
            )
    return incidents


class IncidentCorrelator:
    """Runs the correlation fallback chain against one entity set."""

    def __init__(
        self,
        *,
        client: NewRelicClient | None = None,
        log: LogSink | None = None,
        request_timeout_s: float = CORRELATION_TIMEOUT_S,
        legacy_ceiling_s: float = LEGACY_FALLBACK_CEILING_S,
    ) -> None:
        self.client = client
        self.log = log or logger.debug
        self.request_timeout_s = request_timeout_s
        self.legacy_ceiling_s = legacy_ceiling_s

    def _client_for(self, config: Config) -> NewRelicClient:
        return self.client if self.client is not None else NewRelicClient(config.api_key)

    def correlate(self, config: Config, entity_set: EntitySet) -> int:
        """Mark alerted entities in place. Returns the number of matches.

        Never raises: a stage that fails for any reason counts as zero
        matches and the next stage runs.
        """
        if not entity_set.entities:
            return 0
        client = self._client_for(config)
        stages: list[tuple[str, Callable[..., int]]] = [
            ("probe", self.probe_incidents),
            ("heuristic", self.discover_incidents),
            ("legacy", self.legacy_violations),
        ]
        for stage_name, stage in stages:
            try:
                matched = stage(client, config, entity_set)
            except Exception as e:
                self.log(f"correlation stage {stage_name} failed: {e!r}")
                matched = 0
            self.log(f"correlation stage {stage_name}: {matched} match(es)")
            if matched:
                return matched
        return 0

    def probe_incidents(self, client: NewRelicClient, config: Config, entity_set: EntitySet) -> int:
        guids = [entity.guid for entity in entity_set if entity.guid]
        if not guids:
            return 0
        incidents: list[IncidentCandidate] = []
        for chunk in chunked(guids, PROBE_GUID_CHUNK):
            try:
                payload = client.graphql(probe_query(list(chunk)), timeout=self.request_timeout_s)
            except NerdGraphError as e:
                # Later chunks would hit the same error; keep what was collected
                self.log(f"probe stopped after {len(incidents)} incident(s): {e}")
                break
            incidents.extend(parse_probe_response(payload))
        return apply_candidates(entity_set, incidents)

    def discover_incidents(
        self, client: NewRelicClient, config: Config, entity_set: EntitySet
    ) -> int:
        if not any(entity.guid for entity in entity_set):
            return 0
        if not config.account_id.isdigit():
            self.log("heuristic stage skipped: account id is not numeric")
            return 0
        payload = client.graphql(discovery_query(config.account_id), timeout=self.request_timeout_s)
        candidates = extract_incident_candidates(payload.get("data"))
        self.log(f"heuristic stage found {len(candidates)} candidate(s)")
        return apply_candidates(entity_set, candidates)

    def legacy_violations(
        self, client: NewRelicClient, config: Config, entity_set: EntitySet
    ) -> int:
        # Only the network call runs detached; entity_set is touched on this thread.
        future = run_detached(
            lambda: client.open_violations(timeout=self.request_timeout_s),
            name="osiris-legacy",
        )
        try:
            violations = future.result(timeout=self.legacy_ceiling_s)
        except FuturesTimeoutError:
            self.log("legacy violations timed out")
            return 0
        self.log(f"legacy violations received: {len(violations)}")
        return apply_violations(entity_set, violations, log=self.log)
