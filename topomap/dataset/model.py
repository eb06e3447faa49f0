"""Layer and Dataset records."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from topomap.arcs.arc_collection import ArcCollection
from topomap.dataset.data_table import DataTable


class GeometryType(str, enum.Enum):
    POINT = "point"
    POLYLINE = "polyline"
    POLYGON = "polygon"


PATH_TYPES = (GeometryType.POLYGON, GeometryType.POLYLINE)


def coerce_geometry_type(value: Any) -> GeometryType | str | None:
    """Known type names become GeometryType; falsy and unknown values pass through."""
    if not value or isinstance(value, GeometryType):
        return value or None
    try:
        return GeometryType(value)
    except ValueError:
        return value


# eq=False: layers and datasets are matched by identity (replace_layers, isolate_layer)
@dataclass(eq=False)
class Layer:
    """One geometry type's shapes plus an optional attribute table.

    ``geometry_type`` None means an attribute-only layer. Shapes are index-aligned
    with ``data`` records.
    """

    geometry_type: GeometryType | None = None
    shapes: list[Any] = field(default_factory=list)
    data: DataTable | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        self.geometry_type = coerce_geometry_type(self.geometry_type)

    @property
    def has_paths(self) -> bool:
        return self.geometry_type in PATH_TYPES and any(s for s in self.shapes)

    @property
    def has_points(self) -> bool:
        return self.geometry_type == GeometryType.POINT and any(s for s in self.shapes)


@dataclass(eq=False)
class Dataset:
    """Arcs shared by an ordered list of layers, plus metadata.

    ``arcs`` may be None when no layer has path geometry. The same ArcCollection
    can be referenced by several Dataset records after a shallow copy.
    """

    arcs: ArcCollection | None = None
    layers: list[Layer] = field(default_factory=list)
    info: dict[str, Any] = field(default_factory=dict)
