"""Shared test fixtures."""

from __future__ import annotations

import pytest

from topomap.arcs.arc_collection import ArcCollection
from topomap.arcs.arc_ref import ArcRef
from topomap.dataset.data_table import DataTable
from topomap.dataset.model import Dataset, GeometryType, Layer


# Two unit squares side by side sharing the edge x=1, plus a two-arc polyline
# above them and a point layer.
#
#   arc 0: shared edge        (1,0) -> (1,1)
#   arc 1: left square rest   (1,1) -> (0,1) -> (0,0) -> (1,0)
#   arc 2: right square rest  (1,0) -> (2,0) -> (2,1) -> (1,1)
#   arc 3: line, first half   (0,2) -> (1,2)
#   arc 4: line, second half  (1,2) -> (2,3)
SQUARES_ARCS = [
    [(1, 0), (1, 1)],
    [(1, 1), (0, 1), (0, 0), (1, 0)],
    [(1, 0), (2, 0), (2, 1), (1, 1)],
    [(0, 2), (1, 2)],
    [(1, 2), (2, 3)],
]

LEFT_SQUARE = [[ArcRef(1), ArcRef(0)]]
RIGHT_SQUARE = [[ArcRef(0, True), ArcRef(2)]]
LINE = [[ArcRef(3), ArcRef(4)]]


def make_polygon_layer() -> Layer:
    return Layer(
        geometry_type=GeometryType.POLYGON,
        shapes=[LEFT_SQUARE, RIGHT_SQUARE],
        data=DataTable([{"name": "left"}, {"name": "right"}]),
        name="squares",
    )


def make_line_layer() -> Layer:
    return Layer(geometry_type=GeometryType.POLYLINE, shapes=[LINE], name="line")


def make_point_layer() -> Layer:
    return Layer(
        geometry_type=GeometryType.POINT,
        shapes=[[[5, 5]], [[-1, 4], [3, -2]], None],
        data=DataTable([{"id": 1}, {"id": 2}, None]),
        name="points",
    )


def make_dataset() -> Dataset:
    return Dataset(
        arcs=ArcCollection(SQUARES_ARCS),
        layers=[make_polygon_layer(), make_line_layer(), make_point_layer()],
        info={"source": "fixture"},
    )


def arc_coords(arcs: ArcCollection) -> list[list[tuple[float, float]]]:
    """Plain-list snapshot of every arc, for equality checks."""
    return [[tuple(p) for p in arcs.get_arc_coords(i).tolist()] for i in range(arcs.size())]


@pytest.fixture
def squares_arcs() -> ArcCollection:
    return ArcCollection(SQUARES_ARCS)


@pytest.fixture
def dataset() -> Dataset:
    return make_dataset()


@pytest.fixture
def polygon_dataset() -> Dataset:
    return Dataset(arcs=ArcCollection(SQUARES_ARCS[:3]), layers=[make_polygon_layer()])
