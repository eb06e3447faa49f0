"""Built-in dataset operations. Importing this module registers them."""

from __future__ import annotations

import logging

from topomap.arcs.dissolve import dissolve_arcs
from topomap.dataset.ops import (
    copy_dataset_for_export,
    get_dataset_bounds,
    split_dataset,
    transform_points,
)
from topomap.engine.context import PipelineContext
from topomap.engine.registry import Phase, operation

logger = logging.getLogger(__name__)


@operation(
    id="transform",
    phase=Phase.GEOMETRY,
    description="Apply ctx.point_transform to every vertex and point",
)
def transform(ctx: PipelineContext) -> None:
    fn = ctx.point_transform
    if fn is None:
        logger.debug("transform: no point_transform set, skipping")
        return
    for dataset in ctx.datasets:
        transform_points(dataset, fn)


@operation(
    id="dissolve",
    phase=Phase.STRUCTURE,
    description="Drop unused arcs and merge arcs joined at interior nodes",
)
def dissolve(ctx: PipelineContext) -> None:
    for dataset in ctx.datasets:
        dissolve_arcs(dataset)


@operation(
    id="split",
    phase=Phase.STRUCTURE,
    description="Split every dataset into single-layer datasets",
)
def split(ctx: PipelineContext) -> None:
    ctx.datasets = [part for dataset in ctx.datasets for part in split_dataset(dataset)]


@operation(
    id="bounds",
    phase=Phase.OUTPUT,
    description="Compute the bounding box of each dataset",
)
def bounds(ctx: PipelineContext) -> None:
    ctx.bounds = [get_dataset_bounds(dataset) for dataset in ctx.datasets]


@operation(
    id="export_copy",
    phase=Phase.OUTPUT,
    description="Replace datasets with copies whose coordinates are safe to edit",
)
def export_copy(ctx: PipelineContext) -> None:
    ctx.datasets = [copy_dataset_for_export(dataset) for dataset in ctx.datasets]
