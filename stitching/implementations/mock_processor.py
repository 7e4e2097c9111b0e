"""
Mock Media Processor Implementation

Simulated processor for testing without FFmpeg.
Output bytes are a readable trace of the inputs, so tests can check
ordering directly.
"""

import asyncio
import logging
from typing import Optional, Sequence

from core.media import MediaArtifact
from stitching.constants import STITCH_OUTPUT_MIME_TYPE
from stitching.interfaces.media_processor_interface import (
    MediaProcessingError,
    MediaProcessorInterface,
)


class MockMediaProcessor(MediaProcessorInterface):
    """
    Mock media processor for testing.

    concatenate() joins input bytes with "|"; synthesize_still_video()
    returns b"still(<image>+<audio>,<duration>)".
    """

    def __init__(self, separator: bytes = b"|"):
        self.logger = logging.getLogger(__name__)
        self.separator = separator

        # Inspection for tests
        self.concat_calls: list[list[MediaArtifact]] = []
        self.still_calls: list[dict] = []

        self._next_error: Optional[MediaProcessingError] = None

        self.logger.info("Mock Media Processor initialized")

    async def concatenate(self, inputs: Sequence[MediaArtifact]) -> MediaArtifact:
        await asyncio.sleep(0)
        self._raise_if_scripted()

        if not inputs:
            raise MediaProcessingError("Nothing to concatenate")

        self.concat_calls.append(list(inputs))
        self.logger.info(f"[MOCK] Concatenated {len(inputs)} inputs")
        return MediaArtifact(
            data=self.separator.join(a.data for a in inputs),
            mime_type=STITCH_OUTPUT_MIME_TYPE,
        )

    async def synthesize_still_video(
        self,
        image: MediaArtifact,
        audio: MediaArtifact,
        duration_seconds: float,
    ) -> MediaArtifact:
        await asyncio.sleep(0)
        self._raise_if_scripted()

        if duration_seconds <= 0:
            raise MediaProcessingError(
                f"Still video needs a positive duration, got {duration_seconds}",
            )

        self.still_calls.append(
            {"image": image, "audio": audio, "duration_seconds": duration_seconds},
        )
        self.logger.info(f"[MOCK] Synthesized still video ({duration_seconds}s)")
        data = b"still(" + image.data + b"+" + audio.data + f",{duration_seconds:g})".encode()
        return MediaArtifact(
            data=data,
            mime_type=STITCH_OUTPUT_MIME_TYPE,
            duration_seconds=float(duration_seconds),
        )

    def is_available(self) -> bool:
        """Mock processor is always available"""
        return True

    def _raise_if_scripted(self) -> None:
        if self._next_error is not None:
            error, self._next_error = self._next_error, None
            self.logger.error(f"[MOCK] Processing failed: {error}")
            raise error

    # =========================================================================
    # TESTING HELPER METHODS
    # =========================================================================

    def simulate_failure(self, message: str = "Simulated FFmpeg failure") -> None:
        """Make the next operation raise MediaProcessingError"""
        self._next_error = MediaProcessingError(message)

    def reset_test_config(self) -> None:
        """Clear recorded calls and scripted failures"""
        self.concat_calls.clear()
        self.still_calls.clear()
        self._next_error = None
