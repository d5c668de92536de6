"""
Ingestion pipelines.

Each pipeline drives one source from configuration to emitted records.
"""

from .export_pipeline import ExportPipeline, PipelineExecutionResult, PipelineStatus

__all__ = [
    "ExportPipeline",
    "PipelineExecutionResult",
    "PipelineStatus",
]
