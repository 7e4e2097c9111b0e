"""
Pipeline Module

Continuous media feedback pipeline: one recording per session, stitched
behind the prompt clips, uploaded to Google Drive and persisted.

Public API:
    - PipelineOrchestrator: Drives a feedback run
    - create_pipeline: Factory function
    - FeedbackAnswer / PipelineResult: Inputs and output of a run

Usage:
    from pipeline import FeedbackAnswer, FeedbackMode, create_pipeline

    pipeline = create_pipeline()
    await pipeline.begin(FeedbackMode.AUDIO, consent=False)
    for number in range(1, pipeline.question_count + 1):
        pipeline.record_answer(FeedbackAnswer(number))
    result = await pipeline.complete()
"""

from pipeline.constants import FeedbackMode, PipelineState
from pipeline.controllers.pipeline_orchestrator import (
    PipelineError,
    PipelineOrchestrator,
    PipelineRestartedError,
    PipelineStateError,
)
from pipeline.factory import PipelineFactory, create_pipeline
from pipeline.models import FeedbackAnswer, PipelineResult

# Public API
__all__ = [
    "FeedbackAnswer",
    "FeedbackMode",
    "PipelineError",
    "PipelineFactory",
    "PipelineOrchestrator",
    "PipelineRestartedError",
    "PipelineResult",
    "PipelineState",
    "PipelineStateError",
    "create_pipeline",
]
