"""New Relic API integration (NerdGraph and the legacy REST v2 API)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .constants import NERDGRAPH_URL, USER_AGENT, VIOLATIONS_URL
from .exceptions import DecodeError, NerdGraphError, TransportError

logger = logging.getLogger("osiris")


def _error_message(error: Any) -> str:
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(error)


class NewRelicClient:
    """Thin wrapper around the two New Relic endpoints Osiris talks to.

    Every call takes an explicit timeout; requests failures are raised as
    TransportError and undecodable bodies as DecodeError so callers can
    degrade without inspecting requests exceptions.
    """

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def graphql(self, query: str, *, timeout: float) -> dict[str, Any]:
        """POST a NerdGraph query and return the decoded response body.

        Raises:
            TransportError: Network failure, timeout, or non-200 status
            DecodeError: Body is not a JSON object
            NerdGraphError: Response carries a non-empty ``errors`` list
        """
        headers = {
            "API-Key": self.api_key,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        try:
            response = requests.post(
                NERDGRAPH_URL, json={"query": query}, headers=headers, timeout=timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        logger.debug("NerdGraph response status: %d", response.status_code)
        if response.status_code != 200:
            raise TransportError(
                f"NerdGraph returned {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(str(e)) from e
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}")

        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            raise NerdGraphError(_error_message(errors[0]), errors=errors)
        return data

    def open_violations(self, *, timeout: float) -> list[Any]:
        """Return open violations from the classic Alerts REST API.

        Raises:
            TransportError: Network failure, timeout, or non-200 status
            DecodeError: Body is not a JSON object
        """
        headers = {
            "X-Api-Key": self.api_key,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        try:
            response = requests.get(
                VIOLATIONS_URL,
                params={"only_open": "true"},
                headers=headers,
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        if response.status_code != 200:
            raise TransportError(
                f"Violations API returned {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(str(e)) from e
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}")

        violations = data.get("violations")
        return violations if isinstance(violations, list) else []
