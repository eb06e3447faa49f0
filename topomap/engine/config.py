"""Pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PipelineConfig:
    """Controls how the pipeline reacts to failing operations."""

    # Re-raise the first failure instead of recording it in ctx.errors
    fail_fast: bool = False
    # Stop after the first recorded failure (ignored when fail_fast is set)
    stop_on_error: bool = True
