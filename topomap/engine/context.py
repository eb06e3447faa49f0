"""PipelineContext: the mutable state object flowing through all operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from topomap.arcs.arc_collection import PointTransform
from topomap.dataset.model import Dataset
from topomap.utils.bounds import Bounds


@dataclass
class PipelineContext:
    """Shared state for one pipeline run."""

    # Datasets being processed; operations may replace the list (e.g. split)
    datasets: list[Dataset] = field(default_factory=list)
    # Applied by the "transform" operation
    point_transform: PointTransform | None = None
    # One entry per dataset, filled by the "bounds" operation
    bounds: list[Bounds] = field(default_factory=list)

    # --- Pipeline metadata ---
    completed_operations: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def num_layers(self) -> int:
        return sum(len(d.layers) for d in self.datasets)
