"""Shared pytest fixtures for Osiris tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from osiris.cli_types import ConsoleArgs, ListArgs
from osiris.commands.console.types import Entity, EntitySet
from osiris.config import Config


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def tmp_config_file(tmp_dir: Path) -> Path:
    """Create a config file with credentials and a short refresh interval."""
    path = tmp_dir / ".osiris" / "config"
    path.parent.mkdir(parents=True)
    path.write_text("# osiris\napi_key=NRAK-TEST\naccount_id=1234567\nrefresh_interval=15\n")
    return path


@pytest.fixture
def config() -> Config:
    """Config with credentials set."""
    return Config(api_key="NRAK-TEST", account_id="1234567")


@pytest.fixture
def log_lines() -> list[str]:
    """Collects messages written to a log sink."""
    return []


@pytest.fixture
def silent_log() -> Callable[[str], None]:
    """Log sink that drops everything."""
    return lambda _message: None


@pytest.fixture
def mock_args_console(tmp_config_file: Path) -> ConsoleArgs:
    """Create Args object for console command."""
    return ConsoleArgs(config=str(tmp_config_file), refresh_interval=None)


@pytest.fixture
def mock_args_list(tmp_config_file: Path) -> ListArgs:
    """Create Args object for list command."""
    return ListArgs(config=str(tmp_config_file), json=False, no_correlate=False)


def make_entities(*names: str) -> EntitySet:
    """Build an EntitySet with guid ``g-<name>`` for each name."""
    return EntitySet(entities=[Entity(name=name, guid=f"g-{name}") for name in names])


class FakeSurface:
    """In-memory ListSurface recording what the scheduler paints."""

    def __init__(self) -> None:
        self.rows: list[tuple[str, bool]] = []
        self.selection: int | None = None
        self.status: tuple[str, str] | None = None
        self.clears = 0

    def clear(self) -> None:
        self.rows = []
        self.clears += 1

    def append_row(self, text: str, *, alert: bool) -> None:
        self.rows.append((text, alert))

    def set_selection(self, index: int) -> None:
        self.selection = index

    def set_status(self, text: str, level: str) -> None:
        self.status = (text, level)


class ImmediateDispatcher:
    """Dispatcher that runs submitted closures right away on the caller thread."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[[], None]) -> None:
        self.submitted += 1
        fn()


class FakeClient:
    """Stand-in for NewRelicClient with canned responses and call counters.

    ``responses`` maps a query kind ("search", "probe", "discovery") to a
    payload dict or to an exception instance to raise. A list gives one
    response per call, in order.
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        violations: list[Any] | Exception | None = None,
    ) -> None:
        self.responses = responses or {}
        self.violations = violations if violations is not None else []
        self.calls: dict[str, int] = {"search": 0, "probe": 0, "discovery": 0, "violations": 0}
        self.queries: list[str] = []

    @staticmethod
    def kind_of(query: str) -> str:
        if "entitySearch" in query:
            return "search"
        if "entities(guids" in query:
            return "probe"
        return "discovery"

    def graphql(self, query: str, *, timeout: float) -> dict[str, Any]:
        kind = self.kind_of(query)
        self.calls[kind] += 1
        self.queries.append(query)
        response = self.responses.get(kind, {"data": {}})
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def open_violations(self, *, timeout: float) -> list[Any]:
        self.calls["violations"] += 1
        if isinstance(self.violations, Exception):
            raise self.violations
        return self.violations


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def immediate_dispatcher() -> ImmediateDispatcher:
    return ImmediateDispatcher()
