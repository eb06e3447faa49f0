"""Sequence helpers. No dataset imports."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


def uniq(values: Iterable[T]) -> list[T]:
    """Distinct values in first-seen order."""
    seen: set[T] = set()
    out: list[T] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out
