"""
Stitching Interfaces Package

Exposes the media processor contract and stitching exceptions.
"""

from stitching.interfaces.media_processor_interface import (
    MediaProcessingError,
    MediaProcessorInterface,
    PromptClipFetchError,
    StitchingError,
)

__all__ = [
    "MediaProcessingError",
    "MediaProcessorInterface",
    "PromptClipFetchError",
    "StitchingError",
]
