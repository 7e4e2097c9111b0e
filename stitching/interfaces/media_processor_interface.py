"""
Media Processor Interface

Defines the contract for the opaque media-processing capability used to
stitch prompt clips and the user recording together.

Implementations: FFmpegMediaProcessor (real), MockMediaProcessor (tests).
"""

from abc import ABC, abstractmethod
from typing import Sequence

from core.media import MediaArtifact


class MediaProcessorInterface(ABC):
    """
    Abstract base class for media processors.

    Every method is a suspension point; implementations must not block
    the event loop while encoding.
    """

    @abstractmethod
    async def concatenate(self, inputs: Sequence[MediaArtifact]) -> MediaArtifact:
        """
        Join inputs end to end, in the given order.

        Uses lossless stream copy when every input shares a container,
        a re-encoding concat otherwise.

        Returns:
            One video/mp4 artifact

        Raises:
            MediaProcessingError: If processing fails
        """

    @abstractmethod
    async def synthesize_still_video(
        self,
        image: MediaArtifact,
        audio: MediaArtifact,
        duration_seconds: float,
    ) -> MediaArtifact:
        """
        Build a video showing `image` over `audio`.

        Output length is bounded by both the audio and `duration_seconds`.

        Raises:
            MediaProcessingError: If processing fails
        """

    @abstractmethod
    def is_available(self) -> bool:
        """True if the processor can run (e.g. FFmpeg installed)"""


class StitchingError(Exception):
    """Base exception for stitching failures"""
    pass


class MediaProcessingError(StitchingError):
    """The media processor failed to produce output"""
    pass


class PromptClipFetchError(StitchingError):
    """
    A prompt clip could not be fetched.

    Attributes:
        index: Zero-based position of the failing clip
        source: URL or path of the failing clip
    """

    def __init__(self, index: int, source: str, reason: str):
        super().__init__(f"Failed to fetch prompt clip {index + 1} ({source}): {reason}")
        self.index = index
        self.source = source
