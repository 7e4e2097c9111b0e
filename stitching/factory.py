"""
Stitching Factory

Factory pattern for creating media processors and the stitching engine.
Follows the same pattern as recording/factory.py for consistency.
"""

import logging
from typing import Literal, Optional

from stitching.controllers.stitching_engine import StitchingEngine
from stitching.implementations.clip_fetcher import ClipFetcher
from stitching.implementations.ffmpeg_processor import FFmpegMediaProcessor
from stitching.implementations.mock_processor import MockMediaProcessor
from stitching.interfaces.media_processor_interface import MediaProcessorInterface

# Type alias
ProcessorMode = Literal["auto", "ffmpeg", "mock"]


class StitchingFactory:
    """
    Factory for creating media processors.

    Usage:
        # Auto-detect (uses FFmpeg if installed, mock otherwise)
        processor = StitchingFactory.create_processor()

        # Force mock mode (useful for testing)
        processor = StitchingFactory.create_processor(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_processor(cls, mode: ProcessorMode = "auto") -> MediaProcessorInterface:
        """
        Create a media processor instance.

        Raises:
            RuntimeError: If mode="ffmpeg" but FFmpeg not available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Media Processor (forced)")
            return MockMediaProcessor()

        processor = FFmpegMediaProcessor()
        if processor.is_available():
            cls._logger.info(f"Creating FFmpeg Media Processor ({mode})")
            return processor

        if mode == "ffmpeg":
            raise RuntimeError("FFmpeg processor requested but ffmpeg is not installed")

        cls._logger.warning("FFmpeg not available, using Mock Media Processor")
        return MockMediaProcessor()

    @classmethod
    def create_engine(
        cls,
        mode: ProcessorMode = "auto",
        fetcher: Optional[ClipFetcher] = None,
    ) -> StitchingEngine:
        """Create a StitchingEngine around a processor of the given mode"""
        return StitchingEngine(processor=cls.create_processor(mode), fetcher=fetcher)


# Convenience function for quick creation
def create_media_processor(force_mock: bool = False) -> MediaProcessorInterface:
    """
    Quick processor creation with simple mock override.

    Example:
        processor = create_media_processor()
        processor = create_media_processor(force_mock=True)
    """
    mode = "mock" if force_mock else "auto"
    return StitchingFactory.create_processor(mode=mode)
