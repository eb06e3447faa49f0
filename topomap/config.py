"""Library configuration from environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

from topomap.engine.config import PipelineConfig


class Settings(BaseSettings):
    topomap_env: str = "development"
    topomap_log_level: str = "info"
    topomap_fail_fast: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(fail_fast=self.topomap_fail_fast)


settings = Settings()


def configure_logging(config: Settings | None = None) -> None:
    """Root logging setup for applications embedding topomap."""
    config = config or settings
    logging.basicConfig(
        level=getattr(logging, config.topomap_log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
