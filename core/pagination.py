from __future__ import annotations

from typing import Sequence, TypeVar


PAGE_SIZE = 30
INITIAL_CURSOR = 30

T = TypeVar("T")


def visible(ranked: Sequence[T], cursor: int) -> list[T]:
    """Prefix of the ranked entries currently materialized for display."""
    return list(ranked[: max(0, int(cursor))])


def advance(cursor: int) -> int:
    return int(cursor) + PAGE_SIZE


def reset() -> int:
    return INITIAL_CURSOR


def has_more(ranked: Sequence[object], cursor: int) -> bool:
    return int(cursor) < len(ranked)
