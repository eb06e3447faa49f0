"""Tests for arc dissolve / renumbering."""

from __future__ import annotations

import pytest

from topomap.arcs.arc_collection import ArcCollection
from topomap.arcs.arc_ref import ArcRef
from topomap.arcs.dissolve import dissolve_arcs
from topomap.dataset.model import Dataset, GeometryType, Layer
from topomap.dataset.shapes import shape_to_geometry
from tests.conftest import (
    LEFT_SQUARE,
    RIGHT_SQUARE,
    SQUARES_ARCS,
    arc_coords,
    make_dataset,
    make_line_layer,
    make_point_layer,
    make_polygon_layer,
)


def _polygons(layer: Layer, arcs: ArcCollection):
    return [shape_to_geometry(s, layer.geometry_type, arcs) for s in layer.shapes]


def test_no_arcs_is_noop():
    ds = Dataset(arcs=None, layers=[make_point_layer()])
    dissolve_arcs(ds)
    assert ds.arcs is None


def test_point_only_dataset_drops_arcs():
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[make_point_layer()])
    dissolve_arcs(ds)
    assert ds.arcs is None


def test_shared_edge_is_kept_as_junction():
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[make_polygon_layer()])
    dissolve_arcs(ds)
    # arcs 3 and 4 are unused; 0, 1, 2 meet at two degree-3 nodes
    assert ds.arcs.size() == 3
    assert arc_coords(ds.arcs) == arc_coords(ArcCollection(SQUARES_ARCS[:3]))
    assert ds.layers[0].shapes == [LEFT_SQUARE, RIGHT_SQUARE]


def test_single_ring_merges_into_loop():
    lyr = Layer(geometry_type=GeometryType.POLYGON, shapes=[LEFT_SQUARE])
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    dissolve_arcs(ds)

    assert ds.arcs.size() == 1
    assert arc_coords(ds.arcs)[0] == [(1, 0), (1, 1), (0, 1), (0, 0), (1, 0)]
    assert lyr.shapes == [[[ArcRef(0)]]]
    assert _polygons(lyr, ds.arcs)[0].area == pytest.approx(1.0)


def test_reversed_reference_survives_merge():
    lyr = Layer(geometry_type=GeometryType.POLYGON, shapes=[RIGHT_SQUARE])
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    original = shape_to_geometry(RIGHT_SQUARE, GeometryType.POLYGON, ArcCollection(SQUARES_ARCS))

    dissolve_arcs(ds)

    assert ds.arcs.size() == 1
    # lowest arc (0) runs forward, so arc 2 is flipped into the merged arc
    assert arc_coords(ds.arcs)[0] == [(1, 0), (1, 1), (2, 1), (2, 0), (1, 0)]
    assert lyr.shapes == [[[ArcRef(0, True)]]]
    assert _polygons(lyr, ds.arcs)[0].equals(original)


def test_ring_starting_mid_chain_is_merged_across_seam():
    lyr = Layer(geometry_type=GeometryType.POLYGON, shapes=[[[ArcRef(0), ArcRef(1)]]])
    other = Layer(geometry_type=GeometryType.POLYGON, shapes=[[[ArcRef(1), ArcRef(0)]]])
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr, other])
    dissolve_arcs(ds)
    assert ds.arcs.size() == 1
    assert lyr.shapes == [[[ArcRef(0)]]]
    assert other.shapes == [[[ArcRef(0)]]]


def test_polyline_interior_node_is_merged():
    lyr = make_line_layer()
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    dissolve_arcs(ds)
    assert ds.arcs.size() == 1
    assert arc_coords(ds.arcs)[0] == [(0, 2), (1, 2), (2, 3)]
    assert lyr.shapes == [[[ArcRef(0)]]]


def test_polyline_endpoint_blocks_merge():
    # two separate lines meeting end to end: the shared node is a path endpoint
    lyr = Layer(
        geometry_type=GeometryType.POLYLINE,
        shapes=[[[ArcRef(3)]], [[ArcRef(4)]]],
    )
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    dissolve_arcs(ds)
    assert ds.arcs.size() == 2
    assert lyr.shapes == [[[ArcRef(0)]], [[ArcRef(1)]]]


def test_reversed_polyline_keeps_direction():
    lyr = Layer(
        geometry_type=GeometryType.POLYLINE,
        shapes=[[[ArcRef(4, True), ArcRef(3, True)]]],
    )
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    dissolve_arcs(ds)
    assert lyr.shapes == [[[ArcRef(0, True)]]]
    line = shape_to_geometry(lyr.shapes[0], GeometryType.POLYLINE, ds.arcs)
    assert list(line.geoms[0].coords) == [(2, 3), (1, 2), (0, 2)]


def test_renumbering_preserves_relative_order():
    # square ring collapses to new arc 0; line arc 4 becomes arc 1
    poly = Layer(geometry_type=GeometryType.POLYGON, shapes=[None, LEFT_SQUARE])
    line = Layer(geometry_type=GeometryType.POLYLINE, shapes=[[[ArcRef(4)]]])
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[poly, line])
    dissolve_arcs(ds)
    assert ds.arcs.size() == 2
    assert poly.shapes == [None, [[ArcRef(0)]]]
    assert line.shapes == [[[ArcRef(1)]]]
    assert arc_coords(ds.arcs)[1] == [(1, 2), (2, 3)]


def test_source_arcs_and_shape_lists_untouched():
    source = make_dataset()
    before = arc_coords(source.arcs)
    old_shapes = source.layers[1].shapes
    ds = Dataset(arcs=source.arcs, layers=[source.layers[1]])
    dissolve_arcs(ds)
    assert ds.arcs is not source.arcs
    assert arc_coords(source.arcs) == before
    assert old_shapes == [[[ArcRef(3), ArcRef(4)]]]


def test_thresholds_follow_merged_vertices():
    arcs = ArcCollection(SQUARES_ARCS)
    zz = [float(i) for i in range(arcs.get_point_count())]
    arcs.set_thresholds(zz)
    arcs.set_retained_interval(3.0)
    lyr = Layer(geometry_type=GeometryType.POLYGON, shapes=[LEFT_SQUARE])
    ds = Dataset(arcs=arcs, layers=[lyr])
    dissolve_arcs(ds)
    merged = ds.arcs.get_arc_thresholds(0)
    # arc 0 (inf, inf) then arc 1 interior vertices 3.0, 4.0, closing inf
    assert list(merged[1:4]) == [float("inf"), 3.0, 4.0]
    assert ds.arcs.get_retained_interval() == 3.0


def test_inconsistent_topology_raises():
    # a ring that uses only one of two arcs joined at an interior node
    lyr = Layer(
        geometry_type=GeometryType.POLYGON,
        shapes=[[[ArcRef(3), ArcRef(4)]], [[ArcRef(3)]]],
    )
    ds = Dataset(arcs=ArcCollection(SQUARES_ARCS), layers=[lyr])
    with pytest.raises(ValueError, match="inconsistent"):
        dissolve_arcs(ds)
