"""Cyclic host-name search."""

from __future__ import annotations

from collections.abc import Sequence


def find_next(names: Sequence[str], query: str, from_index: int) -> int | None:
    """Return the index of the next name containing query, or None.

    Matching is case-insensitive. The scan starts just after from_index
    (so -1 starts at 0) and wraps around the list exactly once. An empty
    query means no search is active.
    """
    if not query:
        return None
    total = len(names)
    if total == 0:
        return None
    needle = query.lower()
    start = max(from_index + 1, 0)
    for step in range(total):
        idx = (start + step) % total
        if needle in names[idx].lower():
            return idx
    return None
