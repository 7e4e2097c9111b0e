"""
Stitching Module

Assembles prompt clips and the user recording into one feedback video.

Public API:
    - StitchingEngine: Prompt + recording assembly
    - StitchJob: One stitching run
    - create_media_processor: Factory function
    - get_prompt_clip_sources: Configured prompt clip locations

Usage:
    from stitching import StitchingEngine, create_media_processor

    engine = StitchingEngine(processor=create_media_processor())
    final = await engine.build(sources, artifact, RecordingMode.VIDEO, 60)
"""

from stitching.constants import get_prompt_clip_sources
from stitching.controllers.stitching_engine import StitchingEngine
from stitching.factory import StitchingFactory, create_media_processor
from stitching.interfaces.media_processor_interface import (
    MediaProcessingError,
    PromptClipFetchError,
    StitchingError,
)
from stitching.models import StitchJob

# Public API
__all__ = [
    "MediaProcessingError",
    "PromptClipFetchError",
    "StitchJob",
    "StitchingEngine",
    "StitchingError",
    "StitchingFactory",
    "create_media_processor",
    "get_prompt_clip_sources",
]
