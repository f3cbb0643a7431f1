"""Tests for osiris/commands/console/fetcher.py - entity fetch and fallback."""

from __future__ import annotations

import pytest
from conftest import FakeClient
from osiris.commands.console.fetcher import entity_search_query, fetch_entities, parse_entity_search
from osiris.config import Config
from osiris.exceptions import DecodeError, NerdGraphError, TransportError


def search_payload(*rows) -> dict:
    return {"data": {"actor": {"entitySearch": {"results": {"entities": list(rows)}}}}}


class TestEntitySearchQuery:
    """Tests for entity_search_query."""

    def test_numeric_account_scopes_query(self):
        query = entity_search_query("1234567")
        assert "domain = 'INFRA' AND type = 'HOST'" in query
        assert "accountId = 1234567" in query

    def test_non_numeric_account_not_interpolated(self):
        query = entity_search_query("abc")
        assert "accountId" not in query


class TestParseEntitySearch:
    """Tests for parse_entity_search."""

    def test_rows(self):
        payload = search_payload(
            {"guid": "g1", "name": "web-01", "entityType": "HOST"},
            {"guid": "g2", "name": "db-01", "entityType": "HOST"},
        )
        entities = parse_entity_search(payload)
        assert [e.name for e in entities] == ["web-01", "db-01"]
        assert entities[0].guid == "g1"
        assert entities[0].address == "web-01"

    def test_skips_rows_without_name(self):
        payload = search_payload({"guid": "g1"}, {"guid": "g2", "name": ""}, "junk")
        assert parse_entity_search(payload) == []

    def test_missing_envelope(self):
        assert parse_entity_search({"data": {"actor": None}}) == []


class TestFetchEntities:
    """Tests for fetch_entities failure modes and success."""

    def test_missing_credentials(self, silent_log):
        """No API key/account: synthetic set, no network call."""
        client = FakeClient()
        result = fetch_entities(Config(), client=client, log=silent_log)

        assert result.names() == ["server-1", "server-2", "server-3", "server-4", "server-5"]
        assert result.error == "API key or account ID not configured"
        assert client.calls["search"] == 0

    @pytest.mark.parametrize(
        ("error", "prefix"),
        [
            (TransportError("timed out"), "Error fetching from New Relic: timed out"),
            (DecodeError("bad json"), "Error parsing response: bad json"),
            (NerdGraphError("Invalid API key"), "New Relic API error: Invalid API key"),
        ],
    )
    def test_failure_falls_back(self, config, silent_log, error, prefix):
        """Each failure returns the five sample hosts with a reason."""
        client = FakeClient(responses={"search": error})

        result = fetch_entities(config, client=client, log=silent_log)

        assert len(result) == 5
        assert result.error == prefix

    def test_no_data_object(self, config, silent_log):
        client = FakeClient(responses={"search": {"data": None}})
        result = fetch_entities(config, client=client, log=silent_log)
        assert len(result) == 5
        assert result.error == "Error parsing response: no data returned"

    def test_synthetic_alerts(self, silent_log):
        """server-2 and server-4 carry canned alerts in the offline set."""
        result = fetch_entities(Config(), log=silent_log)
        alerts = {e.name: (e.alert_title, e.alert_detail) for e in result if e.has_alert}
        assert alerts == {
            "server-2": ("CPU High", "CPU > 85%"),
            "server-4": ("Memory", "Memory > 90%"),
        }

    def test_success(self, config, log_lines):
        client = FakeClient(
            responses={"search": search_payload({"guid": "g1", "name": "web-01"})}
        )

        result = fetch_entities(config, client=client, log=log_lines.append)

        assert result.names() == ["web-01"]
        assert result.error == ""
        assert not result.entities[0].has_alert
        assert "Found 1 entities" in log_lines

    def test_empty_success_has_no_error(self, config, silent_log):
        """A valid but empty search is not degraded."""
        client = FakeClient(responses={"search": search_payload()})
        result = fetch_entities(config, client=client, log=silent_log)
        assert len(result) == 0
        assert result.error == ""
