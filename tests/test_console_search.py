"""Tests for osiris/commands/console/search.py - cyclic name search."""

from __future__ import annotations

from osiris.commands.console.search import find_next

NAMES = ["alpha", "beta", "alpha2"]


class TestFindNext:
    """Tests for find_next."""

    def test_cycles_through_matches(self):
        """alpha -> 0, then 2, then wraps to 0."""
        first = find_next(NAMES, "alpha", -1)
        second = find_next(NAMES, "alpha", first)
        third = find_next(NAMES, "alpha", second)
        assert (first, second, third) == (0, 2, 0)

    def test_case_insensitive(self):
        assert find_next(NAMES, "BETA", -1) == 1

    def test_no_match(self):
        assert find_next(NAMES, "gamma", -1) is None

    def test_empty_query(self):
        assert find_next(NAMES, "", -1) is None

    def test_empty_names(self):
        assert find_next([], "alpha", -1) is None

    def test_single_match_returns_itself(self):
        assert find_next(NAMES, "beta", 1) == 1

    def test_stale_index_past_end(self):
        """An index from a longer list still wraps to a valid match."""
        assert find_next(NAMES, "alpha", 10) == 0
