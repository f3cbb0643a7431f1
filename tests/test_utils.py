"""Tests for osiris/utils.py - utility functions."""

from __future__ import annotations

import threading

import pytest
from osiris.utils import chunked, format_elapsed_time, parse_kv_lines, run_detached


class TestParseKvLines:
    """Tests for parse_kv_lines."""

    def test_basic(self):
        assert parse_kv_lines("a=1\nb = 2\n") == {"a": "1", "b": "2"}

    def test_skips_comments_and_blanks(self):
        assert parse_kv_lines("# a=1\n\n  \nb=2") == {"b": "2"}

    def test_splits_on_first_equals(self):
        assert parse_kv_lines("key=a=b") == {"key": "a=b"}

    def test_ignores_lines_without_equals(self):
        assert parse_kv_lines("garbage\nk=v") == {"k": "v"}


class TestFormatElapsedTime:
    """Tests for format_elapsed_time."""

    def test_seconds(self):
        assert format_elapsed_time(45) == "45s"

    def test_minutes(self):
        assert format_elapsed_time(85) == "1m25s"

    def test_hours(self):
        assert format_elapsed_time(3930) == "1h05m30s"


class TestChunked:
    """Tests for chunked."""

    def test_even_and_remainder(self):
        assert list(chunked(list(range(60)), 25)) == [
            list(range(0, 25)),
            list(range(25, 50)),
            list(range(50, 60)),
        ]

    def test_empty(self):
        assert list(chunked([], 25)) == []

    def test_bad_size(self):
        with pytest.raises(ValueError):
            list(chunked([1], 0))


class TestRunDetached:
    """Tests for run_detached."""

    def test_returns_result(self):
        future = run_detached(lambda a, b: a + b, 2, 3, name="adder")
        assert future.result(timeout=5) == 5

    def test_propagates_exception(self):
        def boom():
            raise RuntimeError("boom")

        future = run_detached(boom)
        with pytest.raises(RuntimeError, match="boom"):
            future.result(timeout=5)

    def test_runs_on_daemon_thread(self):
        seen = {}

        def record():
            seen["daemon"] = threading.current_thread().daemon

        run_detached(record).result(timeout=5)
        assert seen["daemon"] is True
