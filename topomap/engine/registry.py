"""Operation registry: every dataset operation is a function registered via decorator.

Usage:
    @operation(id="dissolve", phase=Phase.STRUCTURE, description="Compact arcs")
    def dissolve(ctx: PipelineContext) -> None:
        for dataset in ctx.datasets:
            dissolve_arcs(dataset)

Adding a new operation = one decorated function. Nothing else changes.
"""

from __future__ import annotations

import enum
import heapq
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from topomap.engine.context import PipelineContext

logger = logging.getLogger(__name__)


class Phase(enum.IntEnum):
    GEOMETRY = 0
    STRUCTURE = 1
    OUTPUT = 2


@dataclass
class OperationSpec:
    id: str
    phase: Phase
    fn: Callable[["PipelineContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""


class OperationRegistry:
    """Registry of dataset operations."""

    def __init__(self) -> None:
        self._operations: dict[str, OperationSpec] = {}

    def register(self, spec: OperationSpec) -> None:
        if spec.id in self._operations:
            raise ValueError(f"Duplicate operation ID: {spec.id}")
        self._operations[spec.id] = spec
        logger.debug("Registered operation %s (%s)", spec.id, spec.phase.name)

    def get(self, operation_id: str) -> OperationSpec:
        try:
            return self._operations[operation_id]
        except KeyError:
            raise ValueError(f"Unknown operation: {operation_id}") from None

    def get_phase(self, phase: Phase) -> list[OperationSpec]:
        specs = [s for s in self._operations.values() if s.phase == phase]
        return sorted(specs, key=lambda s: s.id)

    def all(self) -> list[OperationSpec]:
        return sorted(self._operations.values(), key=lambda s: (s.phase, s.id))

    def resolve_order(self, requested_ids: set[str] | None = None) -> list[OperationSpec]:
        """Topological sort respecting dependencies, phase then id on ties.

        If requested_ids is None, run all.
        """
        pool = self._operations if requested_ids is None else self._with_dependencies(requested_ids)

        waiting = {oid: sum(dep in pool for dep in spec.dependencies) for oid, spec in pool.items()}
        dependents: dict[str, list[str]] = {oid: [] for oid in pool}
        for oid, spec in pool.items():
            for dep in spec.dependencies:
                if dep in pool:
                    dependents[dep].append(oid)

        # Kahn's algorithm; the heap keeps ready operations in (phase, id) order
        ready = [(pool[oid].phase, oid) for oid, n in waiting.items() if n == 0]
        heapq.heapify(ready)
        ordered: list[OperationSpec] = []
        while ready:
            _, oid = heapq.heappop(ready)
            ordered.append(pool[oid])
            for child in dependents[oid]:
                waiting[child] -= 1
                if waiting[child] == 0:
                    heapq.heappush(ready, (pool[child].phase, child))

        if len(ordered) != len(pool):
            stuck = sorted(oid for oid, n in waiting.items() if n > 0)
            raise ValueError(f"Circular dependency detected among: {stuck}")
        return ordered

    def _with_dependencies(self, requested_ids: set[str]) -> dict[str, OperationSpec]:
        """Requested operations plus everything they depend on, transitively."""
        selected: dict[str, OperationSpec] = {}
        pending = list(requested_ids)
        while pending:
            oid = pending.pop()
            if oid not in selected:
                selected[oid] = self.get(oid)
                pending.extend(selected[oid].dependencies)
        return selected

    @property
    def count(self) -> int:
        return len(self._operations)


# Module-level singleton
_registry = OperationRegistry()


def get_registry() -> OperationRegistry:
    return _registry


def operation(
    *,
    id: str,
    phase: Phase,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Decorator to register an operation function."""

    def decorator(fn: Callable[["PipelineContext"], None]):
        spec = OperationSpec(
            id=id,
            phase=phase,
            fn=fn,
            dependencies=dependencies or [],
            description=description,
        )
        _registry.register(spec)
        return fn

    return decorator
