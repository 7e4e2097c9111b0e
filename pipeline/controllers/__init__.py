"""
Pipeline Controllers Package

Coordinates recording, stitching, upload and persistence for one run.
"""

from pipeline.controllers.pipeline_orchestrator import (
    PipelineError,
    PipelineOrchestrator,
    PipelineRestartedError,
    PipelineStateError,
)

# Public API
__all__ = [
    "PipelineError",
    "PipelineOrchestrator",
    "PipelineRestartedError",
    "PipelineStateError",
]
