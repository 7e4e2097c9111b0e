"""
Mock Capture Device Implementation

Simulated camera/microphone for testing without real hardware or FFmpeg.
Mimics the chunk cadence and stop signalling of a real device.

This is a "Fake" (test double) - it has working logic but no real hardware.
"""

import asyncio
import logging
from typing import List, Optional

from recording.constants import RecordingMode
from recording.interfaces.capture_device_interface import (
    CaptureDeviceInterface,
    CaptureError,
    CaptureProcessError,
    ChunkCallback,
    ErrorCallback,
    LiveStream,
    MediaTrack,
    StopCallback,
)


class MockTrack(MediaTrack):
    """Track that only records how often it was stopped"""

    def __init__(self, kind: str, label: str = ""):
        super().__init__(kind, label)
        self._live = True
        self.stop_count = 0

    @property
    def is_live(self) -> bool:
        return self._live

    def stop(self) -> None:
        self.stop_count += 1
        self._live = False


class MockCaptureDevice(CaptureDeviceInterface):
    """
    Mock capture device for testing.

    Chunks are the bytes b"chunk-0000;", b"chunk-0001;", ... so tests can
    check ordering of the final recording by simple concatenation.

    Usage:
        device = MockCaptureDevice(simulate_timing=False)
        stream = await device.open_stream(RecordingMode.AUDIO)
        device.start_recording(stream, 1.0, on_chunk, on_stop)
        device.emit_chunk()           # deliver one chunk now
        device.request_stop()         # final chunk + on_stop on next loop turn
    """

    def __init__(
        self,
        simulate_timing: bool = True,
        final_chunk: Optional[bytes] = b"final;",
    ):
        """
        Initialize mock capture device.

        Args:
            simulate_timing: If True, a background task emits one chunk per
                           timeslice. If False, chunks are only emitted
                           through emit_chunk() (deterministic tests).
            final_chunk: Data flushed after request_stop(), None for nothing
        """
        self.logger = logging.getLogger(__name__)
        self.simulate_timing = simulate_timing
        self.final_chunk = final_chunk

        # State tracking
        self._recording = False
        self._stop_requested = False
        self._chunk_index = 0
        self._emit_task: Optional[asyncio.Task] = None
        self._on_chunk: Optional[ChunkCallback] = None
        self._on_stop: Optional[StopCallback] = None
        self._on_error: Optional[ErrorCallback] = None

        # Inspection helpers
        self.last_stream: Optional[LiveStream] = None
        self.opened_modes: List[RecordingMode] = []
        self.emitted_chunks: List[bytes] = []
        self.stop_requests = 0

        # Configuration for test scenarios
        self._access_error: Optional[Exception] = None
        self._start_error: Optional[Exception] = None
        self._withhold_stop = False
        self._stop_delay = 0.0

        self.logger.info(
            f"Mock Capture Device initialized (simulate_timing: {simulate_timing})"
        )

    async def open_stream(self, mode: RecordingMode) -> LiveStream:
        """Simulate a device grant, or raise the configured access error"""
        # Grant happens asynchronously on a real device
        await asyncio.sleep(0)

        self.opened_modes.append(mode)

        if self._access_error is not None:
            self.logger.error(f"[MOCK] Simulated access failure: {self._access_error}")
            raise self._access_error

        tracks: List[MediaTrack] = []
        if mode == RecordingMode.VIDEO:
            tracks.append(MockTrack("video", "Mock Camera"))
        tracks.append(MockTrack("audio", "Mock Microphone"))

        self.last_stream = LiveStream(tracks)
        self.logger.info(f"[MOCK] Stream opened ({', '.join(self.last_stream.kinds)})")
        return self.last_stream

    def start_recording(
        self,
        stream: LiveStream,
        timeslice: float,
        on_chunk: ChunkCallback,
        on_stop: StopCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        if self._recording:
            raise CaptureError("[MOCK] Already recording")

        if self._start_error is not None:
            raise self._start_error

        if not stream.active:
            raise CaptureError("Cannot record from a stream without live tracks")

        self._on_chunk = on_chunk
        self._on_stop = on_stop
        self._on_error = on_error
        self._recording = True
        self._stop_requested = False

        self.logger.info(f"[MOCK] Recording started (timeslice: {timeslice}s)")

        if self.simulate_timing:
            self._emit_task = asyncio.get_running_loop().create_task(
                self._emit_worker(timeslice),
            )

    async def _emit_worker(self, timeslice: float) -> None:
        """Emit one chunk per timeslice until stop is requested"""
        while self._recording and not self._stop_requested:
            await asyncio.sleep(timeslice)
            if self._recording and not self._stop_requested:
                self._emit(self._next_chunk())

    def _next_chunk(self) -> bytes:
        chunk = f"chunk-{self._chunk_index:04d};".encode()
        self._chunk_index += 1
        return chunk

    def _emit(self, data: bytes) -> None:
        self.emitted_chunks.append(data)
        if self._on_chunk:
            self._on_chunk(data)

    def request_stop(self) -> None:
        """
        Simulate a stop request.

        The final chunk and the stop signal are delivered on a later loop
        turn, like a real encoder flushing its buffer.
        """
        self.stop_requests += 1

        if not self._recording or self._stop_requested:
            self.logger.debug("[MOCK] Stop requested while not recording")
            return

        self._stop_requested = True
        self._cancel_emit_task()

        if self._withhold_stop:
            self.logger.warning("[MOCK] Withholding stop signal")
            return

        asyncio.get_running_loop().call_later(self._stop_delay, self._finish_stop)

    def _finish_stop(self) -> None:
        if not self._recording:
            return

        if self.final_chunk:
            self._emit(self.final_chunk)

        self._recording = False
        self.logger.info("[MOCK] Recording stopped")

        if self._on_stop:
            self._on_stop()

    def _cancel_emit_task(self) -> None:
        if self._emit_task and not self._emit_task.done():
            self._emit_task.cancel()
        self._emit_task = None

    def is_recording(self) -> bool:
        """Check if mock device is emitting chunks"""
        return self._recording

    def is_available(self, mode: RecordingMode = RecordingMode.VIDEO) -> bool:
        """Mock device is always available"""
        return True

    def cleanup(self) -> None:
        """Stop emitting and release the last stream"""
        self.logger.debug("[MOCK] Cleanup")
        self._recording = False
        self._cancel_emit_task()
        if self.last_stream:
            self.last_stream.stop_all_tracks()

    # =========================================================================
    # TESTING HELPER METHODS (not part of CaptureDeviceInterface)
    # =========================================================================
    # These methods are ONLY for testing - configure mock behavior

    def emit_chunk(self, data: Optional[bytes] = None) -> None:
        """
        Deliver one chunk immediately.

        Example:
            device.emit_chunk()             # b"chunk-0000;"
            device.emit_chunk(b"custom")    # explicit payload
        """
        if not self._recording or self._stop_requested:
            self.logger.debug("[MOCK] Not recording, chunk dropped")
            return
        self._emit(data if data is not None else self._next_chunk())

    def simulate_access_error(self, error: Exception) -> None:
        """
        Configure mock to fail on the next open_stream() call.

        Example:
            device.simulate_access_error(DeviceBusyError("in use"))
        """
        self._access_error = error
        self.logger.debug(f"[MOCK] Configured to fail access with {error!r}")

    def simulate_start_failure(self, error: Optional[Exception] = None) -> None:
        """Configure mock to fail on the next start_recording() call"""
        self._start_error = error or CaptureError("Simulated encoder failure")

    def withhold_stop_signal(self) -> None:
        """Never flush or signal on_stop after request_stop()"""
        self._withhold_stop = True

    def delay_stop_signal(self, seconds: float) -> None:
        """Deliver the final chunk and stop signal `seconds` after request_stop()"""
        self._stop_delay = seconds

    def fail_recording(self, error: Optional[Exception] = None) -> None:
        """
        Simulate the device dying while recording.

        Example:
            device.fail_recording()   # session moves to FAILED
        """
        error = error or CaptureProcessError("Simulated device failure")
        self._recording = False
        self._cancel_emit_task()
        self.logger.warning(f"[MOCK] Simulating device failure: {error}")
        if self._on_error:
            self._on_error(error)

    def reset_test_config(self) -> None:
        """Reset test configuration to normal operation"""
        self._access_error = None
        self._start_error = None
        self._withhold_stop = False
        self._stop_delay = 0.0
        self.logger.debug("[MOCK] Test configuration reset")
