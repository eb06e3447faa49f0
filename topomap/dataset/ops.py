"""Dataset and layer orchestration: divide, split, copy, replace, isolate, bounds.

Copy levels, cheapest last:
- ``copy_dataset``: arcs, shapes and attribute tables all independent.
- ``copy_dataset_for_export``: arcs and shapes independent, tables shared.
- ``copy_dataset_for_renaming``: new layer records only, everything nested shared.
Pick the cheapest one that still covers what the caller will mutate.
"""

from __future__ import annotations

import copy
import fnmatch
import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from topomap.arcs.arc_collection import ArcCollection, PointTransform
from topomap.arcs.arc_ref import for_each_arc_id
from topomap.arcs.dissolve import dissolve_arcs
from topomap.dataset.data_table import DataTable, Record
from topomap.dataset.model import PATH_TYPES, Dataset, GeometryType, Layer
from topomap.dataset.shapes import (
    clone_shapes,
    get_point_bounds,
    transform_points_in_layer,
)
from topomap.utils.bounds import Bounds
from topomap.utils.seq import uniq

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Building layers
# -----------------------------------------------------------------------------
def divide_features_by_type(
    shapes: Sequence[Any],
    properties: Sequence[Record | None],
    types: Sequence[str | GeometryType | None],
) -> list[Layer]:
    """Split mixed-type features into one layer per geometry type.

    Layers follow the first-seen order of ``types``. A falsy type yields an
    attribute-only layer (no shapes, records kept). ``data`` is None only when
    every record routed to the layer is null. ``properties`` may be shorter
    than ``shapes`` (or empty); missing records count as null.
    """
    if len(types) != len(shapes):
        raise ValueError(f"Expected {len(shapes)} geometry types, got {len(types)}")
    records = list(properties) + [None] * (len(shapes) - len(properties))
    layers = []
    for geo_type in uniq(types):
        s: list[Any] = []
        p: list[Record | None] = []
        for shape, rec, t in zip(shapes, records, types):
            if t != geo_type:
                continue
            if geo_type:
                s.append(shape)
            p.append(rec)
        has_data = any(rec is not None for rec in p)
        layers.append(
            Layer(
                geometry_type=geo_type or None,
                shapes=s,
                data=DataTable(p) if has_data else None,
            )
        )
    return layers


def init_data_table(layer: Layer) -> None:
    layer.data = DataTable(get_feature_count(layer))


# -----------------------------------------------------------------------------
# Split / isolate / replace
# -----------------------------------------------------------------------------
def isolate_layer(layer: Layer, dataset: Dataset) -> Dataset:
    """Shallow dataset copy holding only ``layer``; arcs and info are shared."""
    return replace(dataset, layers=[lyr for lyr in dataset.layers if lyr is layer])


def split_dataset(dataset: Dataset) -> list[Dataset]:
    """One dataset per layer, each with its own dissolved arcs.

    Each split gets a shell copy of its layer, so dissolving rewrites private
    shape lists and the source dataset keeps its arcs and shapes. Attribute
    tables are shared with the source.
    """
    splits = []
    for lyr in dataset.layers:
        split = isolate_layer(lyr, dataset)
        split.layers = [replace(lyr)]
        dissolve_arcs(split)
        splits.append(split)
    logger.debug("Split dataset into %d single-layer datasets", len(splits))
    return splits


def replace_layers(
    dataset: Dataset, cut_layers: Sequence[Layer], new_layers: Sequence[Layer]
) -> None:
    """Swap ``cut_layers[i]`` for ``new_layers[i]`` in place, keeping layer positions.

    Extra cut layers are removed. Extra new layers follow the last inserted
    layer, or are appended when nothing was cut. Safe to call with
    ``cut_layers is dataset.layers``.
    """
    curr = list(dataset.layers)
    insert_at: int | None = None
    for i in range(max(len(cut_layers), len(new_layers))):
        cut = cut_layers[i] if i < len(cut_layers) else None
        new = new_layers[i] if i < len(new_layers) else None
        if cut is not None:
            idx = next((j for j, lyr in enumerate(curr) if lyr is cut), None)
            if idx is None:
                raise ValueError(f"Layer {cut.name!r} is not in the dataset")
            del curr[idx]
        else:
            idx = len(curr) if insert_at is None else insert_at
        if new is not None:
            curr.insert(idx, new)
            idx += 1
        insert_at = idx
    dataset.layers = curr


def find_matching_layers(layers: Sequence[Layer], pattern: str) -> list[Layer]:
    """Layers matching a comma-separated list of 1-based indexes or name wildcards."""
    terms = [t.strip() for t in pattern.split(",") if t.strip()]

    def matches(lyr: Layer, i: int) -> bool:
        for term in terms:
            if term.isdigit():
                if int(term) == i + 1:
                    return True
            elif lyr.name is not None and fnmatch.fnmatchcase(lyr.name, term):
                return True
        return False

    return [lyr for i, lyr in enumerate(layers) if matches(lyr, i)]


# -----------------------------------------------------------------------------
# Copying
# -----------------------------------------------------------------------------
def copy_layer_shapes(layer: Layer) -> Layer:
    """New layer record with cloned shapes; data shared."""
    return replace(layer, shapes=clone_shapes(layer.shapes))


def copy_layer(layer: Layer) -> Layer:
    """Deep copy: cloned shapes and attribute table."""
    lyr = copy_layer_shapes(layer)
    if lyr.data is not None:
        lyr.data = lyr.data.clone()
    return lyr


def get_output_layer(src: Layer, no_replace: bool = False) -> Layer:
    """Stub layer of the same type if ``no_replace``, else ``src`` itself."""
    if no_replace:
        return Layer(geometry_type=src.geometry_type)
    return src


def _filtered_arcs(arcs: ArcCollection | None) -> ArcCollection | None:
    return arcs.get_filtered_copy() if arcs is not None else None


def copy_dataset(dataset: Dataset) -> Dataset:
    """Deep copy, safe for any later mutation."""
    return Dataset(
        arcs=_filtered_arcs(dataset.arcs),
        layers=[copy_layer(lyr) for lyr in dataset.layers],
        info=copy.deepcopy(dataset.info),
    )


def copy_dataset_for_export(dataset: Dataset) -> Dataset:
    """Independent coordinates; attribute tables shared with the source."""
    return Dataset(
        arcs=_filtered_arcs(dataset.arcs),
        layers=[copy_layer_shapes(lyr) for lyr in dataset.layers],
        info=dict(dataset.info),
    )


def copy_dataset_for_renaming(dataset: Dataset) -> Dataset:
    """New layer records so names can change; shapes, data, arcs, info shared."""
    return replace(dataset, layers=[replace(lyr) for lyr in dataset.layers])


# -----------------------------------------------------------------------------
# Counts, bounds, predicates
# -----------------------------------------------------------------------------
def get_feature_count(layer: Layer) -> int:
    if layer.data is not None:
        return layer.data.size()
    if layer.shapes:
        return len(layer.shapes)
    return 0


def count_multipart_features(shapes: Sequence[Any]) -> int:
    return sum(1 for shape in shapes if shape and len(shape) > 1)


def dataset_has_paths(dataset: Dataset) -> bool:
    return any(lyr.has_paths for lyr in dataset.layers)


def get_path_bounds(shapes: Sequence[Any], arcs: ArcCollection) -> Bounds:
    bounds = Bounds()
    for_each_arc_id(shapes, lambda ref: arcs.merge_arc_bounds(ref, bounds))
    return bounds


def get_layer_bounds(layer: Layer, arcs: ArcCollection | None) -> Bounds | None:
    """Bounds of a layer's shapes, or None for layers without spatial extent."""
    if layer.geometry_type == GeometryType.POINT:
        return get_point_bounds(layer.shapes)
    if layer.geometry_type in PATH_TYPES:
        if arcs is None:
            return None
        return get_path_bounds(layer.shapes, arcs)
    if layer.geometry_type is not None:
        logger.debug("No bounds for unsupported geometry type %r", layer.geometry_type)
    return None


def get_dataset_bounds(dataset: Dataset) -> Bounds:
    bounds = Bounds()
    for lyr in dataset.layers:
        lyr_bounds = get_layer_bounds(lyr, dataset.arcs)
        if lyr_bounds is not None:
            bounds.merge_bounds(lyr_bounds)
    return bounds


# -----------------------------------------------------------------------------
# Coordinate transforms
# -----------------------------------------------------------------------------
def transform_points(dataset: Dataset, fn: PointTransform) -> None:
    """Transform every arc vertex and point in place. Shapes are not repaired."""
    if dataset.arcs is not None:
        dataset.arcs.transform_points(fn)
    for lyr in dataset.layers:
        if lyr.has_points:
            transform_points_in_layer(lyr, fn)
