"""Shared-topology vector data model: arcs, layers, datasets."""

from topomap.arcs.arc_collection import ArcCollection
from topomap.arcs.arc_ref import ArcRef, for_each_arc_id
from topomap.arcs.dissolve import dissolve_arcs
from topomap.dataset.data_table import DataTable
from topomap.dataset.model import Dataset, GeometryType, Layer
from topomap.dataset.ops import (
    copy_dataset,
    copy_dataset_for_export,
    copy_dataset_for_renaming,
    divide_features_by_type,
    get_dataset_bounds,
    get_feature_count,
    get_layer_bounds,
    isolate_layer,
    replace_layers,
    split_dataset,
    transform_points,
)
from topomap.utils.bounds import Bounds

__all__ = [
    "ArcCollection",
    "ArcRef",
    "Bounds",
    "DataTable",
    "Dataset",
    "GeometryType",
    "Layer",
    "copy_dataset",
    "copy_dataset_for_export",
    "copy_dataset_for_renaming",
    "dissolve_arcs",
    "divide_features_by_type",
    "for_each_arc_id",
    "get_dataset_bounds",
    "get_feature_count",
    "get_layer_bounds",
    "isolate_layer",
    "replace_layers",
    "split_dataset",
    "transform_points",
]
