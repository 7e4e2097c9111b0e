"""
Implementations Package

Concrete media processors and the clip fetcher.
"""

from stitching.implementations.clip_fetcher import ClipFetcher, ClipFetchError
from stitching.implementations.ffmpeg_processor import FFmpegMediaProcessor
from stitching.implementations.mock_processor import MockMediaProcessor

__all__ = [
    "ClipFetchError",
    "ClipFetcher",
    "FFmpegMediaProcessor",
    "MockMediaProcessor",
]
