"""
FFmpeg Capture Device Implementation

Real capture using an FFmpeg subprocess driven from asyncio.
FFmpeg encodes camera/microphone input to WebM on stdout; a reader task
slices that byte stream into timed chunks.

This wraps FFmpeg to match our CaptureDeviceInterface.
"""

import asyncio
import logging
import os
import shutil
from collections import deque
from typing import Callable, Deque, Optional

from recording.constants import (
    AUDIO_INPUT_DEVICE,
    CAPTURE_READ_SIZE,
    CAPTURE_READ_TIMEOUT,
    CAPTURE_WARMUP_TIME,
    DEFAULT_CAMERA_DEVICE,
    FORCE_KILL_TIMEOUT,
    RecordingMode,
    get_ffmpeg_capture_command,
    validate_camera_device,
)
from recording.interfaces.capture_device_interface import (
    CaptureDeviceInterface,
    CaptureError,
    CaptureProcessError,
    ChunkCallback,
    DeviceBusyError,
    DeviceNotFoundError,
    ErrorCallback,
    LiveStream,
    MediaTrack,
    PermissionDeniedError,
    StopCallback,
)

FFMPEG_MISSING_MESSAGE = "FFmpeg not found. Install with: sudo apt-get install ffmpeg"


class FFmpegTrack(MediaTrack):
    """
    One input of the running FFmpeg process.

    FFmpeg holds all inputs in a single process, so the process is
    terminated once the last track of the stream is stopped.
    """

    def __init__(self, kind: str, label: str, on_release: Callable[[], None]):
        super().__init__(kind, label)
        self._live = True
        self._on_release = on_release

    @property
    def is_live(self) -> bool:
        return self._live

    def stop(self) -> None:
        if not self._live:
            return
        self._live = False
        self._on_release()


class FFmpegCaptureDevice(CaptureDeviceInterface):
    """
    Capture device using FFmpeg.

    Usage:
        device = FFmpegCaptureDevice(camera_device="/dev/video0")
        stream = await device.open_stream(RecordingMode.VIDEO)
        device.start_recording(stream, 1.0, on_chunk, on_stop, on_error)
        # ... chunks arrive every second ...
        device.request_stop()
        stream.stop_all_tracks()
    """

    def __init__(
        self,
        camera_device: str = DEFAULT_CAMERA_DEVICE,
        audio_device: str = AUDIO_INPUT_DEVICE,
        warmup_time: float = CAPTURE_WARMUP_TIME,
    ):
        """
        Initialize FFmpeg capture device.

        Args:
            camera_device: Path to camera device (e.g., /dev/video0)
            audio_device: PulseAudio source name
            warmup_time: Seconds FFmpeg gets to open its inputs
        """
        self.logger = logging.getLogger(__name__)

        # Configuration
        self.camera_device = camera_device
        self.audio_device = audio_device
        self.warmup_time = warmup_time

        # State tracking
        self._process: Optional[asyncio.subprocess.Process] = None
        self._stream: Optional[LiveStream] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._stderr_tail: Deque[str] = deque(maxlen=20)
        self._recording = False
        self._stop_requested = False

        self._on_chunk: Optional[ChunkCallback] = None
        self._on_stop: Optional[StopCallback] = None
        self._on_error: Optional[ErrorCallback] = None

        self.logger.info(
            f"FFmpeg Capture Device initialized "
            f"(camera: {camera_device}, audio: {audio_device})",
        )

    async def open_stream(self, mode: RecordingMode) -> LiveStream:
        """
        Launch FFmpeg against the devices of `mode`.

        The process is checked after a short warmup; an early exit is
        classified from FFmpeg's stderr.
        """
        if self._process is not None and self._process.returncode is None:
            raise DeviceBusyError("Capture device already has an open stream")

        if not shutil.which("ffmpeg"):
            raise CaptureError(FFMPEG_MISSING_MESSAGE)

        if mode == RecordingMode.VIDEO:
            if not validate_camera_device(self.camera_device):
                raise DeviceNotFoundError(
                    f"Camera device not found: {self.camera_device}",
                )
            if not os.access(self.camera_device, os.R_OK | os.W_OK):
                raise PermissionDeniedError(
                    f"No permission to access camera: {self.camera_device}",
                )

        command = get_ffmpeg_capture_command(
            mode,
            camera_device=self.camera_device,
            audio_device=self.audio_device,
        )
        self.logger.debug(f"FFmpeg command: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,  # Don't wait for stdin
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise CaptureError(FFMPEG_MISSING_MESSAGE)

        self._stderr_tail.clear()
        self._stderr_task = asyncio.get_running_loop().create_task(
            self._drain_stderr(process),
        )

        # Give FFmpeg time to open the devices
        await asyncio.sleep(self.warmup_time)

        if process.returncode is not None:
            await self._stderr_task
            raise self._classify_start_failure(self._stderr_text())

        self._process = process
        self._stop_requested = False

        tracks = []
        if mode == RecordingMode.VIDEO:
            tracks.append(FFmpegTrack("video", self.camera_device, self._release))
        tracks.append(FFmpegTrack("audio", self.audio_device, self._release))
        self._stream = LiveStream(tracks)

        self.logger.info(
            f"Capture stream opened (PID: {process.pid}, "
            f"tracks: {', '.join(self._stream.kinds)})",
        )
        return self._stream

    def _classify_start_failure(self, message: str) -> CaptureError:
        if "Device or resource busy" in message:
            return DeviceBusyError(f"Capture device is busy: {message}")
        if "Permission denied" in message:
            return PermissionDeniedError(f"Capture device refused access: {message}")
        if "No such file or directory" in message or "No such device" in message:
            return DeviceNotFoundError(f"Capture device not found: {message}")
        return CaptureProcessError(f"FFmpeg failed to start: {message}")

    def start_recording(
        self,
        stream: LiveStream,
        timeslice: float,
        on_chunk: ChunkCallback,
        on_stop: StopCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        if self._recording:
            raise CaptureError("Already recording")

        if (
            self._process is None
            or self._process.returncode is not None
            or stream is not self._stream
            or not stream.active
        ):
            raise CaptureError("Capture stream is not open")

        self._on_chunk = on_chunk
        self._on_stop = on_stop
        self._on_error = on_error
        self._recording = True

        self._reader_task = asyncio.get_running_loop().create_task(
            self._read_worker(self._process, timeslice),
        )
        self.logger.info(f"Capture recording started (timeslice: {timeslice}s)")

    async def _read_worker(
        self,
        process: asyncio.subprocess.Process,
        timeslice: float,
    ) -> None:
        """Slice FFmpeg stdout into one chunk per timeslice until EOF"""
        assert process.stdout is not None

        loop = asyncio.get_running_loop()
        buffer = bytearray()
        next_flush = loop.time() + timeslice

        try:
            while True:
                try:
                    data = await asyncio.wait_for(
                        process.stdout.read(CAPTURE_READ_SIZE),
                        timeout=CAPTURE_READ_TIMEOUT,
                    )
                except asyncio.TimeoutError:
                    data = None

                if data == b"":
                    break  # EOF, FFmpeg closed its output
                if data:
                    buffer.extend(data)

                now = loop.time()
                if now >= next_flush:
                    self._flush(buffer)
                    next_flush = max(next_flush + timeslice, now)

            # Whatever FFmpeg wrote while finalizing is the final chunk
            self._flush(buffer)
            returncode = await process.wait()

        except Exception as e:
            self._recording = False
            self._signal_error(CaptureProcessError(f"Capture read failed: {e}"))
            return

        self._recording = False

        if self._stop_requested:
            self.logger.info(f"Capture stopped (exit code {returncode})")
            if self._on_stop:
                self._on_stop()
        else:
            self._signal_error(
                CaptureProcessError(
                    f"FFmpeg exited unexpectedly (code {returncode}): "
                    f"{self._stderr_text()}",
                ),
            )

    def _flush(self, buffer: bytearray) -> None:
        if not buffer:
            return
        chunk = bytes(buffer)
        buffer.clear()
        if self._on_chunk:
            self._on_chunk(chunk)

    def _signal_error(self, error: Exception) -> None:
        self.logger.error(str(error))
        if self._on_error:
            self._on_error(error)

    async def _drain_stderr(self, process: asyncio.subprocess.Process) -> None:
        """Keep the tail of FFmpeg's stderr for error reporting"""
        assert process.stderr is not None
        async for line in process.stderr:
            text = line.decode("utf-8", errors="ignore").strip()
            if text:
                self._stderr_tail.append(text)

    def _stderr_text(self) -> str:
        return " | ".join(self._stderr_tail) or "no error output"

    def request_stop(self) -> None:
        """
        Stop FFmpeg gracefully.

        SIGTERM makes FFmpeg flush its encoders and write the container
        trailer to stdout before exiting; the reader task turns that into
        the final chunk and then signals on_stop.
        """
        if not self._recording or self._stop_requested:
            self.logger.debug("Not recording, nothing to stop")
            return

        self._stop_requested = True
        self.logger.info("Stopping capture...")
        self._terminate()

    def _release(self) -> None:
        """Called by tracks; ends the process once no track is live"""
        if self._stream is not None and self._stream.active:
            return

        self._stop_requested = True
        self._terminate()
        self._stream = None

    def _terminate(self) -> None:
        process = self._process
        if process is None or process.returncode is not None:
            return

        try:
            process.terminate()
        except ProcessLookupError:
            return

        asyncio.get_running_loop().create_task(self._ensure_exit(process))

    async def _ensure_exit(self, process: asyncio.subprocess.Process) -> None:
        try:
            await asyncio.wait_for(process.wait(), timeout=FORCE_KILL_TIMEOUT)
        except asyncio.TimeoutError:
            # Force kill if graceful shutdown failed
            self.logger.warning("FFmpeg didn't stop gracefully, force killing")
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()

    def is_recording(self) -> bool:
        return self._recording

    def is_available(self, mode: RecordingMode = RecordingMode.VIDEO) -> bool:
        """
        Check if FFmpeg and the devices `mode` needs are available.

        Audio capture reads the PulseAudio source only, so it does not
        need a camera.
        """
        # Check if FFmpeg is installed
        if not shutil.which("ffmpeg"):
            self.logger.warning("FFmpeg not found in PATH")
            return False

        if mode == RecordingMode.AUDIO:
            return True

        # Check if camera device exists
        if not validate_camera_device(self.camera_device):
            self.logger.warning(f"Camera not found: {self.camera_device}")
            return False

        return True

    def cleanup(self) -> None:
        """
        Stop capture and clean up resources.
        """
        self.logger.info("Cleaning up FFmpeg Capture Device")

        self._recording = False
        self._stop_requested = True

        if self._process is not None and self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass

        for task in (self._reader_task, self._stderr_task):
            if task is not None and not task.done():
                task.cancel()

        self._process = None
        self._stream = None
        self.logger.info("FFmpeg Capture Device cleanup complete")
