"""Axis-aligned bounding box. No dataset imports."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from shapely.geometry import Polygon, box


@dataclass
class Bounds:
    """Mutable (xmin, ymin, xmax, ymax) box. All None = empty."""

    xmin: float | None = None
    ymin: float | None = None
    xmax: float | None = None
    ymax: float | None = None

    def has_bounds(self) -> bool:
        return self.xmin is not None

    def merge_point(self, x: float, y: float) -> Bounds:
        if not self.has_bounds():
            self.xmin, self.ymin, self.xmax, self.ymax = x, y, x, y
        else:
            self.xmin = min(self.xmin, x)
            self.ymin = min(self.ymin, y)
            self.xmax = max(self.xmax, x)
            self.ymax = max(self.ymax, y)
        return self

    def merge_bounds(self, other: Bounds | Sequence[float]) -> Bounds:
        """Expand to include another Bounds or an (xmin, ymin, xmax, ymax) sequence."""
        if isinstance(other, Bounds):
            if not other.has_bounds():
                return self
            coords = other.to_tuple()
        else:
            coords = tuple(float(c) for c in other)
            if len(coords) != 4:
                raise ValueError(f"Expected 4 bounds values, got {len(coords)}")
        xmin, ymin, xmax, ymax = coords
        if not self.has_bounds():
            self.xmin, self.ymin, self.xmax, self.ymax = xmin, ymin, xmax, ymax
        else:
            self.xmin = min(self.xmin, xmin)
            self.ymin = min(self.ymin, ymin)
            self.xmax = max(self.xmax, xmax)
            self.ymax = max(self.ymax, ymax)
        return self

    def to_tuple(self) -> tuple[float, float, float, float]:
        if not self.has_bounds():
            raise ValueError("Empty bounds")
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    def width(self) -> float:
        return self.xmax - self.xmin if self.has_bounds() else 0.0

    def height(self) -> float:
        return self.ymax - self.ymin if self.has_bounds() else 0.0

    def centroid(self) -> tuple[float, float]:
        if not self.has_bounds():
            return (0.0, 0.0)
        return ((self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2)

    def to_polygon(self) -> Polygon:
        """Shapely rectangle covering this box (empty polygon if no bounds)."""
        if not self.has_bounds():
            return Polygon()
        return box(*self.to_tuple())

    def clone(self) -> Bounds:
        return Bounds(self.xmin, self.ymin, self.xmax, self.ymax)
