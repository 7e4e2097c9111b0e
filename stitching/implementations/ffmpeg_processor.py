"""
FFmpeg Media Processor Implementation

Runs FFmpeg as an asyncio subprocess over temporary files.
Inputs and outputs stay in memory as MediaArtifacts; the temporary
directory only lives for one invocation. File reads and writes run in
a worker thread so large media never blocks the event loop.
"""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from core.media import MediaArtifact
from stitching.constants import (
    FFMPEG_LOG_LEVEL,
    STITCH_AUDIO_BITRATE,
    STITCH_AUDIO_CODEC,
    STITCH_AUDIO_SAMPLE_RATE,
    STITCH_FRAME_RATE,
    STITCH_OUTPUT_MIME_TYPE,
    STITCH_PIXEL_FORMAT,
    STITCH_TIMEOUT,
    STITCH_VIDEO_CODEC,
    STITCH_VIDEO_HEIGHT,
    STITCH_VIDEO_PRESET,
    STITCH_VIDEO_WIDTH,
)
from stitching.interfaces.media_processor_interface import (
    MediaProcessingError,
    MediaProcessorInterface,
)
from stitching.utils.media_utils import build_concat_list, format_file_size, share_container

OUTPUT_FILE = "output.mp4"
CONCAT_LIST_FILE = "concat_list.txt"

# Lines of FFmpeg stderr kept in error messages
STDERR_TAIL_LINES = 10


class FFmpegMediaProcessor(MediaProcessorInterface):
    """
    Media processor backed by the ffmpeg command line tool.

    Features:
    - Stream copy concat (concat demuxer) when containers match
    - Re-encoding concat (concat filter) with scale/pad normalization otherwise
    - Still-image video synthesis for audio-only feedback
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout: float = STITCH_TIMEOUT,
        width: int = STITCH_VIDEO_WIDTH,
        height: int = STITCH_VIDEO_HEIGHT,
    ):
        self.logger = logging.getLogger(__name__)
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.width = width
        self.height = height

        self.logger.info(f"FFmpeg Media Processor initialized ({width}x{height})")

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    async def concatenate(self, inputs: Sequence[MediaArtifact]) -> MediaArtifact:
        if not inputs:
            raise MediaProcessingError("Nothing to concatenate")

        with tempfile.TemporaryDirectory(prefix="stitch_") as tmp:
            workdir = Path(tmp)
            names = await asyncio.to_thread(self._write_inputs, workdir, inputs)

            if share_container(inputs):
                self.logger.info(f"Concatenating {len(inputs)} inputs (stream copy)")
                (workdir / CONCAT_LIST_FILE).write_text(build_concat_list(names))
                args = self._stream_copy_args()
            else:
                self.logger.info(f"Concatenating {len(inputs)} inputs (re-encode)")
                args = self._reencode_args(names)

            await self._run(args, workdir)
            return await asyncio.to_thread(self._read_output, workdir, None)

    async def synthesize_still_video(
        self,
        image: MediaArtifact,
        audio: MediaArtifact,
        duration_seconds: float,
    ) -> MediaArtifact:
        if duration_seconds <= 0:
            raise MediaProcessingError(
                f"Still video needs a positive duration, got {duration_seconds}",
            )

        with tempfile.TemporaryDirectory(prefix="stitch_") as tmp:
            workdir = Path(tmp)
            image_name = f"input_image.{image.extension}"
            audio_name = f"input_audio.{audio.extension}"
            await asyncio.to_thread((workdir / image_name).write_bytes, image.data)
            await asyncio.to_thread((workdir / audio_name).write_bytes, audio.data)

            self.logger.info(
                f"Creating video from audio ({format_file_size(audio.size)}) "
                f"and image ({format_file_size(image.size)}), {duration_seconds}s",
            )
            args = [
                "-loop", "1",
                "-i", image_name,
                "-i", audio_name,
                "-c:v", STITCH_VIDEO_CODEC,
                "-c:a", STITCH_AUDIO_CODEC,
                "-b:a", STITCH_AUDIO_BITRATE,
                "-pix_fmt", STITCH_PIXEL_FORMAT,
                "-shortest",
                "-t", f"{duration_seconds:g}",
                "-movflags", "+faststart",
                OUTPUT_FILE,
            ]
            await self._run(args, workdir)
            return await asyncio.to_thread(self._read_output, workdir, float(duration_seconds))

    def is_available(self) -> bool:
        if shutil.which(self.ffmpeg_path) is None:
            self.logger.warning("FFmpeg not found. Install with: sudo apt-get install ffmpeg")
            return False
        return True

    # =========================================================================
    # COMMAND BUILDING
    # =========================================================================

    def _write_inputs(self, workdir: Path, inputs: Sequence[MediaArtifact]) -> List[str]:
        names = []
        for index, artifact in enumerate(inputs):
            name = f"input{index}.{artifact.extension}"
            (workdir / name).write_bytes(artifact.data)
            self.logger.debug(f"Written {name} ({artifact.size} bytes)")
            names.append(name)
        return names

    def _stream_copy_args(self) -> List[str]:
        return [
            "-f", "concat",
            "-safe", "0",
            "-i", CONCAT_LIST_FILE,
            "-c", "copy",
            "-avoid_negative_ts", "make_zero",
            OUTPUT_FILE,
        ]

    def _reencode_args(self, names: Sequence[str]) -> List[str]:
        """Concat filter; every input is scaled and padded to the output frame"""
        w, h = self.width, self.height
        args: List[str] = []
        filters = []
        streams = []
        for index, name in enumerate(names):
            args += ["-i", name]
            filters.append(
                f"[{index}:v]scale={w}:{h}:force_original_aspect_ratio=decrease,"
                f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1,"
                f"fps={STITCH_FRAME_RATE},format={STITCH_PIXEL_FORMAT}[v{index}]",
            )
            filters.append(f"[{index}:a]aresample={STITCH_AUDIO_SAMPLE_RATE}[a{index}]")
            streams.append(f"[v{index}][a{index}]")

        filters.append(f"{''.join(streams)}concat=n={len(names)}:v=1:a=1[outv][outa]")

        return args + [
            "-filter_complex", ";".join(filters),
            "-map", "[outv]",
            "-map", "[outa]",
            "-c:v", STITCH_VIDEO_CODEC,
            "-preset", STITCH_VIDEO_PRESET,
            "-c:a", STITCH_AUDIO_CODEC,
            "-b:a", STITCH_AUDIO_BITRATE,
            "-movflags", "+faststart",
            OUTPUT_FILE,
        ]

    # =========================================================================
    # PROCESS EXECUTION
    # =========================================================================

    async def _run(self, args: Sequence[str], workdir: Path) -> None:
        command = [self.ffmpeg_path, "-y", "-loglevel", FFMPEG_LOG_LEVEL, *args]
        self.logger.debug(f"FFmpeg command: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(workdir),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise MediaProcessingError(
                "FFmpeg not found. Install with: sudo apt-get install ffmpeg",
            ) from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise MediaProcessingError(f"FFmpeg timed out after {self.timeout}s") from e

        if process.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-STDERR_TAIL_LINES:]
            raise MediaProcessingError(
                f"FFmpeg exited with code {process.returncode}: {' | '.join(tail)}",
            )

    def _read_output(self, workdir: Path, duration: Optional[float]) -> MediaArtifact:
        output = workdir / OUTPUT_FILE
        if not output.exists() or output.stat().st_size == 0:
            raise MediaProcessingError("FFmpeg produced no output")

        artifact = MediaArtifact(
            data=output.read_bytes(),
            mime_type=STITCH_OUTPUT_MIME_TYPE,
            duration_seconds=duration,
        )
        self.logger.info(f"FFmpeg output ready: {format_file_size(artifact.size)}")
        return artifact
