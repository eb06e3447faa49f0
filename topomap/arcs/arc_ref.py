"""Signed arc references.

Paths hold ``ArcRef(index, reversed)`` pairs. The single-integer encoding used by
importers/exporters (``i`` forward, ``~i`` reverse) is only converted here.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, NamedTuple


class ArcRef(NamedTuple):
    index: int
    reversed: bool = False

    @classmethod
    def decode(cls, value: int) -> ArcRef:
        value = int(value)
        if value < 0:
            return cls(~value, True)
        return cls(value, False)

    def encode(self) -> int:
        return ~self.index if self.reversed else self.index

    def reverse(self) -> ArcRef:
        return ArcRef(self.index, not self.reversed)


def as_arc_ref(ref: ArcRef | int) -> ArcRef:
    """Accept either an ArcRef or an encoded int."""
    if isinstance(ref, ArcRef):
        return ref
    return ArcRef.decode(ref)


def reverse_path(path: list[ArcRef]) -> list[ArcRef]:
    """Same boundary traversed the other way."""
    return [ref.reverse() for ref in reversed(path)]


def for_each_arc_id(shapes: Iterable[Any], fn: Callable[[ArcRef], None]) -> None:
    """Call fn once per reference, in path order, for every non-null shape."""
    for shape in shapes:
        if not shape:
            continue
        for path in shape:
            for ref in path:
                fn(ref)


def decode_path(path: Iterable[int]) -> list[ArcRef]:
    return [ArcRef.decode(v) for v in path]


def encode_path(path: Iterable[ArcRef]) -> list[int]:
    return [ref.encode() for ref in path]


def decode_shapes(shapes: Iterable[Any]) -> list[list[list[ArcRef]] | None]:
    """Convert nested int-encoded shapes (as read from a file) into ArcRef paths."""
    return [None if shape is None else [decode_path(p) for p in shape] for shape in shapes]


def encode_shapes(shapes: Iterable[Any]) -> list[list[list[int]] | None]:
    return [None if shape is None else [encode_path(p) for p in shape] for shape in shapes]
