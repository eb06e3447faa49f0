"""Attribute records aligned 1:1 with a layer's shapes."""

from __future__ import annotations

import copy
from collections.abc import Callable, Sequence
from typing import Any

Record = dict[str, Any]


class DataTable:
    """Ordered attribute records. A record may be None (feature without attributes).

    ``DataTable(n)`` creates ``n`` empty records; ``DataTable(records)`` wraps an
    existing list (not copied).
    """

    def __init__(self, source: Sequence[Record | None] | int | None = None) -> None:
        if source is None:
            self._records: list[Record | None] = []
        elif isinstance(source, int):
            self._records = [{} for _ in range(source)]
        else:
            self._records = source if isinstance(source, list) else list(source)

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get_records(self) -> list[Record | None]:
        return self._records

    def get_record_at(self, i: int) -> Record | None:
        return self._records[i]

    def clone(self) -> DataTable:
        """Deep copy; null records stay null."""
        return DataTable([copy.deepcopy(rec) for rec in self._records])

    def get_fields(self) -> list[str]:
        """Field names in first-seen order across all records."""
        fields: dict[str, None] = {}
        for rec in self._records:
            if rec:
                fields.update(dict.fromkeys(rec))
        return list(fields)

    def field_exists(self, name: str) -> bool:
        return any(rec is not None and name in rec for rec in self._records)

    def add_field(self, name: str, init: Any = None) -> None:
        """Add a field to every record. ``init`` may be a value or ``fn(record) -> value``.

        Null records become empty records first.
        """
        if self.field_exists(name):
            raise ValueError(f"Field already exists: {name}")
        for i, rec in enumerate(self._records):
            if rec is None:
                rec = self._records[i] = {}
            rec[name] = init(rec) if callable(init) else init

    def delete_field(self, name: str) -> None:
        for rec in self._records:
            if rec is not None:
                rec.pop(name, None)

    def filter_records(self, keep: Callable[[Record | None, int], bool]) -> DataTable:
        return DataTable([rec for i, rec in enumerate(self._records) if keep(rec, i)])
