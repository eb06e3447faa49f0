"""Pipeline orchestrator: runs dataset operations one after another."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from topomap.engine.config import PipelineConfig
from topomap.engine.context import PipelineContext
from topomap.engine.registry import OperationRegistry, OperationSpec, Phase, get_registry

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs registered operations over a PipelineContext, synchronously."""

    def __init__(
        self,
        registry: OperationRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()

    def run(self, ctx: PipelineContext, requested: set[str] | None = None) -> PipelineContext:
        """Run the requested operations (plus dependencies) in resolved order."""
        ordered = self.registry.resolve_order(requested)
        logger.info("Pipeline: %d operations queued", len(ordered))
        return self._execute(ctx, ordered)

    def run_sequence(self, ctx: PipelineContext, operation_ids: Iterable[str]) -> PipelineContext:
        """Run operations exactly in the given order; dependencies are not added."""
        ordered = [self.registry.get(oid) for oid in operation_ids]
        return self._execute(ctx, ordered)

    def run_phase(self, ctx: PipelineContext, phase: Phase) -> PipelineContext:
        """Run only operations in a specific phase."""
        return self._execute(ctx, self.registry.get_phase(phase))

    def _execute(self, ctx: PipelineContext, ordered: list[OperationSpec]) -> PipelineContext:
        start = time.perf_counter()

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                if self.config.fail_fast:
                    raise
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)
                if self.config.stop_on_error:
                    break
                continue
            ctx.completed_operations.add(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d/%d operations in %.0fms (%d datasets)",
            len(ctx.completed_operations),
            len(ordered),
            total,
            len(ctx.datasets),
        )
        return ctx


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory for a pipeline over the built-in operations."""
    import topomap.engine.operations  # noqa: F401  (registers built-ins)

    return Pipeline(config=config)
