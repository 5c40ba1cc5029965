"""Exporter factory."""

from __future__ import annotations

from orgjekyll.config import ExportSectionConfig
from orgjekyll.exporter.base import BlogExporter, ExportOptions
from orgjekyll.exporter.pandoc import PandocExporter


def create_exporter(config: ExportSectionConfig | None = None) -> BlogExporter:
    """Create the configured exporter (pandoc is the only backend)."""
    config = config or ExportSectionConfig()
    return PandocExporter(
        binary=config.pandoc,
        extra_args=config.pandoc_args,
        timeout=config.timeout,
    )


__all__ = ["BlogExporter", "ExportOptions", "PandocExporter", "create_exporter"]
