"""
Stitching Engine

Assembles the final feedback video: every prompt clip in order, followed
by the user's recording. Audio-only recordings are first turned into a
video over a placeholder still image.

Works purely on in-memory artifacts; all media work is delegated to a
MediaProcessorInterface.
"""

import logging
from typing import Optional, Sequence

from core.media import MediaArtifact
from recording.constants import RecordingMode
from stitching.constants import PLACEHOLDER_IMAGE, STITCH_OUTPUT_MIME_TYPE
from stitching.implementations.clip_fetcher import ClipFetcher, ClipFetchError
from stitching.interfaces.media_processor_interface import (
    MediaProcessingError,
    MediaProcessorInterface,
    StitchingError,
)
from stitching.models import StitchJob
from stitching.utils.media_utils import format_file_size


class StitchingEngine:
    """
    Builds one output artifact per feedback session.

    Ordering: prompt 1, prompt 2, ..., user clip. Any failure is fatal
    and no partial output is produced.

    Usage:
        engine = StitchingEngine(processor=FFmpegMediaProcessor())
        final = await engine.build(
            get_prompt_clip_sources(),
            session.final_artifact,
            RecordingMode.AUDIO,
            duration_hint=45,
        )
    """

    def __init__(
        self,
        processor: MediaProcessorInterface,
        fetcher: Optional[ClipFetcher] = None,
        placeholder_image: str = PLACEHOLDER_IMAGE,
    ):
        """
        Initialize stitching engine.

        Args:
            processor: Media processing capability
            fetcher: Source loader for clips and the placeholder image
            placeholder_image: URL or path of the still used for audio mode
        """
        self.logger = logging.getLogger(__name__)
        self.processor = processor
        self.fetcher = fetcher or ClipFetcher()
        self.placeholder_image = placeholder_image

        # Most recent job, kept for diagnostics
        self.last_job: Optional[StitchJob] = None

        self.logger.info(
            f"Stitching Engine initialized (processor: {type(processor).__name__})",
        )

    async def build(
        self,
        prompt_clips: Sequence[str],
        user_artifact: MediaArtifact,
        mode: RecordingMode,
        duration_hint: float,
    ) -> MediaArtifact:
        """
        Stitch prompt clips and the user recording into one video.

        Args:
            prompt_clips: Ordered prompt clip URLs or paths
            user_artifact: Final artifact of a stopped recording session
            mode: Recording mode of user_artifact
            duration_hint: Recording length in seconds; bounds the
                audio-mode still video

        Returns:
            video/mp4 artifact

        Raises:
            PromptClipFetchError: If a prompt clip cannot be fetched
            MediaProcessingError: If the processor fails
            StitchingError: For invalid input
        """
        job = StitchJob(
            prompt_clips=tuple(prompt_clips),
            user_artifact=user_artifact,
            mode=mode,
            duration_hint=duration_hint,
        )
        self.last_job = job
        self._validate(job)

        self.logger.info(
            f"🎬 Stitching {len(job.prompt_clips)} prompt clips with "
            f"{mode.value} recording ({format_file_size(user_artifact.size)})",
        )

        prompts = await self.fetcher.fetch_all(job.prompt_clips)

        if mode == RecordingMode.AUDIO:
            user_clip = await self._audio_to_video(user_artifact, job.duration_hint)
        else:
            user_clip = user_artifact

        output = await self._process(self.processor.concatenate, [*prompts, user_clip])
        if output.mime_type != STITCH_OUTPUT_MIME_TYPE:
            output = MediaArtifact(
                data=output.data,
                mime_type=STITCH_OUTPUT_MIME_TYPE,
                duration_seconds=output.duration_seconds,
            )

        job.set_output(output)
        self.logger.info(f"✅ Stitching completed ({format_file_size(output.size)})")
        return output

    def _validate(self, job: StitchJob) -> None:
        if job.user_artifact.size == 0:
            raise StitchingError("No recording available to process")
        if job.mode == RecordingMode.AUDIO and job.duration_hint <= 0:
            raise StitchingError(
                f"Audio stitching needs a positive duration, got {job.duration_hint}",
            )

    async def _audio_to_video(self, audio: MediaArtifact, duration: float) -> MediaArtifact:
        try:
            image = await self.fetcher.fetch(self.placeholder_image)
        except ClipFetchError as e:
            raise StitchingError(f"Failed to fetch placeholder image: {e}") from e

        self.logger.info("🎤 Creating video from audio recording")
        return await self._process(self.processor.synthesize_still_video, image, audio, duration)

    async def _process(self, operation, *args) -> MediaArtifact:
        """Run a processor call, normalizing unexpected failures"""
        try:
            return await operation(*args)
        except StitchingError:
            raise
        except Exception as e:
            self.logger.error(f"Media processing error: {e}", exc_info=True)
            raise MediaProcessingError(f"Media processing failed: {e}") from e
