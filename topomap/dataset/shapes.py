"""Shape-level helpers: cloning, point iteration, shapely views."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from numbers import Number
from typing import Any

from shapely.geometry import LineString, MultiLineString, MultiPoint, Polygon
from shapely.geometry.base import BaseGeometry

from topomap.arcs.arc_collection import ArcCollection, PointTransform
from topomap.dataset.model import GeometryType, Layer
from topomap.utils.bounds import Bounds

logger = logging.getLogger(__name__)


def clone_shape(shape: Any) -> Any:
    """Copy nested lists; ArcRefs and numbers are immutable and kept."""
    if isinstance(shape, list):
        return [clone_shape(part) for part in shape]
    return shape


def clone_shapes(shapes: list[Any]) -> list[Any]:
    return [clone_shape(s) for s in shapes]


def _is_pair(value: Any) -> bool:
    return len(value) >= 2 and isinstance(value[0], Number) and isinstance(value[1], Number)


def iter_shape_points(shape: Any) -> Iterator[list[float]]:
    """Yield each [x, y] of a point shape. A bare pair is a one-point shape."""
    if not shape:
        return
    if _is_pair(shape):
        yield shape
        return
    for p in shape:
        if p:
            yield p


def count_points_in_layer(layer: Layer) -> int:
    return sum(1 for shape in layer.shapes for _ in iter_shape_points(shape))


def get_point_bounds(shapes: list[Any]) -> Bounds:
    bounds = Bounds()
    for shape in shapes:
        for p in iter_shape_points(shape):
            bounds.merge_point(p[0], p[1])
    return bounds


def transform_points_in_layer(layer: Layer, fn: PointTransform) -> None:
    """Rewrite point coordinates in place.

    Moved points become ``[x, y]`` lists (extra coordinates kept), so shapes
    holding ``(x, y)`` tuples can be transformed too.
    """
    for i, shape in enumerate(layer.shapes):
        if not shape:
            continue
        if _is_pair(shape):
            q = fn(shape[0], shape[1])
            if q is not None:
                layer.shapes[i] = [q[0], q[1], *shape[2:]]
            continue
        if not isinstance(shape, list):
            shape = layer.shapes[i] = list(shape)
        for j, p in enumerate(shape):
            if not p:
                continue
            q = fn(p[0], p[1])
            if q is not None:
                shape[j] = [q[0], q[1], *p[2:]]


def layer_has_paths(layer: Layer) -> bool:
    return layer.has_paths


def layer_has_points(layer: Layer) -> bool:
    return layer.has_points


def path_to_coords(path: list[Any], arcs: ArcCollection) -> list[tuple[float, float]]:
    """Concatenate the arcs of a path, dropping the repeated vertex at each joint."""
    coords: list[tuple[float, float]] = []
    for ref in path:
        pts = arcs.get_arc_coords(ref)
        start = 1 if coords else 0
        coords.extend((float(x), float(y)) for x, y in pts[start:])
    return coords


def shape_to_geometry(
    shape: Any, geometry_type: GeometryType | None, arcs: ArcCollection | None = None
) -> BaseGeometry | None:
    """Shapely view of one shape. Polygon rings are unioned (holes via even-odd overlap)."""
    if not shape:
        return None
    if geometry_type == GeometryType.POINT:
        return MultiPoint([(p[0], p[1]) for p in iter_shape_points(shape)])
    if arcs is None:
        logger.debug("Shape has paths but dataset has no arcs")
        return None
    if geometry_type == GeometryType.POLYLINE:
        return MultiLineString([LineString(path_to_coords(path, arcs)) for path in shape])
    if geometry_type == GeometryType.POLYGON:
        rings = [Polygon(path_to_coords(path, arcs)) for path in shape]
        result = rings[0]
        for ring in rings[1:]:
            result = result.symmetric_difference(ring)
        return result
    return None
