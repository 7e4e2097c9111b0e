"""
Recording Session

Manages one continuous recording: device acquisition, chunk accumulation,
elapsed-time tracking and the stop/flush handshake with the device.

This is the high-level controller the pipeline orchestrator uses.

SOLID Principles:
- Single Responsibility: Only manages recording session lifecycle
- Open/Closed: Easy to add callbacks for different events
- Dependency Inversion: Depends on CaptureDeviceInterface
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.media import MediaArtifact
from core.state_machine import StateMachine
from recording.constants import (
    RECORDING_CHUNK_INTERVAL,
    RECORDING_STOP_TIMEOUT,
    RECORDING_TRANSITIONS,
    DeviceErrorKind,
    RecordingMode,
    RecordingState,
    format_duration,
    get_device_error_message,
    get_mime_type,
)
from recording.interfaces.capture_device_interface import (
    CaptureDeviceInterface,
    LiveStream,
    classify_device_error,
)


class RecordingError(Exception):
    """Base exception for recording session failures"""
    pass


class RecordingStartError(RecordingError):
    """
    Device acquisition or recorder start failed.

    Attributes:
        kind: DeviceErrorKind classification
        detail: Message of the underlying device error
    """

    def __init__(self, message: str, kind: DeviceErrorKind, detail: str = ""):
        super().__init__(message)
        self.kind = kind
        self.detail = detail


class RecordingStateError(RecordingError):
    """Operation not allowed in the session's current state"""
    pass


class RecordingNotStoppedError(RecordingStateError):
    """Final artifact requested before the session reached STOPPED"""
    pass


class RecordingStopTimeoutError(RecordingError):
    """Device never confirmed the final flush"""
    pass


class RecordingAbortedError(RecordingError):
    """Session abandoned (restart or shutdown)"""
    pass


class RecordingDeviceError(RecordingError):
    """Device failed while recording"""
    pass


class RecordingSession:
    """
    Manages a single continuous recording.

    Features:
    - One device grant per session, released exactly once
    - Chunks accumulated in emission order
    - Elapsed seconds frozen as duration when stop is requested
    - Stop waits for the device flush, bounded by stop_timeout
    - Callbacks for state changes and errors

    Usage:
        session = RecordingSession(device, RecordingMode.VIDEO)
        session.on_error = lambda msg: print(msg)

        await session.start()
        # ... user answers prompts ...
        artifact = await session.stop()
    """

    def __init__(
        self,
        device: CaptureDeviceInterface,
        mode: RecordingMode,
        chunk_interval: float = RECORDING_CHUNK_INTERVAL,
        stop_timeout: float = RECORDING_STOP_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize recording session.

        Args:
            device: Capture device to record from
            mode: VIDEO (camera + microphone) or AUDIO (microphone)
            chunk_interval: Seconds between device chunk emissions
            stop_timeout: Max seconds to wait for the final flush
            clock: Monotonic time source (injectable for tests)
        """
        self.logger = logging.getLogger(__name__)
        self.device = device
        self.mode = mode
        self.chunk_interval = chunk_interval
        self.stop_timeout = stop_timeout
        self._clock = clock

        self._machine = StateMachine(
            RecordingState.IDLE,
            RECORDING_TRANSITIONS,
            name=f"RecordingSession[{mode.value}]",
        )
        self._machine.on_state_change = self._on_machine_state_change

        # Session data
        self._stream: Optional[LiveStream] = None
        self._chunks: List[bytes] = []
        self._start_time: Optional[float] = None
        self._duration: Optional[int] = None
        self._final_artifact: Optional[MediaArtifact] = None
        self._error: Optional[RecordingError] = None

        # Stop handshake
        self._flushed: Optional[asyncio.Future] = None
        self._stop_task: Optional[asyncio.Task] = None

        # Callbacks for events
        self.on_state_change: Optional[Callable[[RecordingState, RecordingState], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

        self.logger.info(f"Recording Session initialized (mode: {mode.value})")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> RecordingState:
        return self._machine.current_state

    @property
    def chunks(self) -> Tuple[bytes, ...]:
        return tuple(self._chunks)

    @property
    def live_stream(self) -> Optional[LiveStream]:
        """Stream for live preview while the device is held"""
        return self._stream

    @property
    def error(self) -> Optional[RecordingError]:
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        return str(self._error) if self._error else None

    @property
    def elapsed_seconds(self) -> int:
        """
        Whole seconds since recording became active.

        Frozen at the moment stop was requested.
        """
        if self._duration is not None:
            return self._duration
        if self._start_time is None or self.state != RecordingState.ACTIVE:
            return 0
        return int(self._clock() - self._start_time)

    @property
    def duration_seconds(self) -> Optional[int]:
        return self._duration

    @property
    def final_artifact(self) -> MediaArtifact:
        """
        The finished recording.

        Raises:
            RecordingNotStoppedError: Session has not reached STOPPED
        """
        if self.state != RecordingState.STOPPED or self._final_artifact is None:
            raise RecordingNotStoppedError(
                f"No final recording - session in state: {self.state.value}",
            )
        return self._final_artifact

    def is_active(self) -> bool:
        return self.state == RecordingState.ACTIVE

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """
        Acquire the device and begin recording.

        Raises:
            RecordingStateError: Session was already started
            RecordingStartError: Device acquisition or recorder start failed
            RecordingAbortedError: Session was aborted while the device
                                   grant was pending
        """
        if self.state != RecordingState.IDLE:
            raise RecordingStateError(
                f"Cannot start - session in state: {self.state.value}",
            )

        self._machine.transition_to(RecordingState.REQUESTING_DEVICE, "start")

        try:
            stream = await self.device.open_stream(self.mode)
        except Exception as e:
            if self.state == RecordingState.REQUESTING_DEVICE:
                self._fail(self._start_error(e))
            self.logger.error(f"Device acquisition failed: {e}")
            raise self._error from e

        if self.state != RecordingState.REQUESTING_DEVICE:
            # Aborted while waiting for the grant
            released = stream.stop_all_tracks()
            self.logger.info(f"Released {released} late-granted track(s)")
            raise self._error or RecordingAbortedError("Session aborted")

        self._stream = stream
        self._chunks = []
        self._final_artifact = None
        self._error = None
        self._duration = None

        try:
            self.device.start_recording(
                stream,
                self.chunk_interval,
                self._handle_chunk,
                self._handle_device_stopped,
                self._handle_device_error,
            )
        except Exception as e:
            self._fail(self._start_error(e))
            self.logger.error(f"Recorder failed to start: {e}")
            raise self._error from e

        self._start_time = self._clock()
        self._machine.transition_to(RecordingState.ACTIVE, "device granted")

    def _start_error(self, error: Exception) -> RecordingStartError:
        kind = classify_device_error(error)
        message = get_device_error_message(kind, self.mode, str(error))
        return RecordingStartError(message, kind, str(error))

    async def stop(self) -> MediaArtifact:
        """
        Stop recording and return the final artifact.

        Only one stop is ever in progress; concurrent callers share it.
        Device tracks are released whether or not the flush succeeds.

        Returns:
            MediaArtifact with every chunk in order and the frozen duration

        Raises:
            RecordingStateError: Session was never active
            RecordingStopTimeoutError: Device did not flush in time
            RecordingError: Device failed or session aborted during stop
        """
        if self.state == RecordingState.STOPPED:
            return self.final_artifact

        if self._stop_task is not None:
            return await asyncio.shield(self._stop_task)

        if self.state != RecordingState.ACTIVE:
            raise RecordingStateError(
                f"Cannot stop - session in state: {self.state.value}",
            )

        loop = asyncio.get_running_loop()
        self._duration = self.elapsed_seconds
        self._flushed = loop.create_future()
        self._machine.transition_to(RecordingState.STOPPING, "stop requested")

        self._stop_task = loop.create_task(self._run_stop())
        return await asyncio.shield(self._stop_task)

    async def _run_stop(self) -> MediaArtifact:
        assert self._flushed is not None

        try:
            self.device.request_stop()
            await asyncio.wait_for(
                asyncio.shield(self._flushed),
                timeout=self.stop_timeout,
            )
        except asyncio.TimeoutError:
            self._fail(
                RecordingStopTimeoutError(
                    f"Recording did not finish within {self.stop_timeout}s",
                ),
            )
            raise self._error
        except RecordingError:
            # Already failed through _fail (device error or abort)
            raise
        except Exception as e:
            self._fail(RecordingDeviceError(f"Recording failed while stopping: {e}"))
            raise self._error from e
        finally:
            self._release_device()

        if self.state != RecordingState.STOPPING:
            raise self._error or RecordingAbortedError("Session aborted")

        artifact = MediaArtifact(
            data=b"".join(self._chunks),
            mime_type=get_mime_type(self.mode),
            duration_seconds=float(self._duration or 0),
        )
        self._final_artifact = artifact
        self._machine.transition_to(RecordingState.STOPPED, "device flushed")

        self.logger.info(
            f"Recording complete: {len(self._chunks)} chunks, "
            f"{artifact.size} bytes, {format_duration(artifact.duration_seconds or 0)}",
        )
        return artifact

    def abort(self, reason: str = "aborted") -> None:
        """
        Abandon the session and release the device.

        Safe to call in any state; terminal sessions only re-check that
        the device is released.
        """
        if self._machine.is_in(RecordingState.STOPPED, RecordingState.FAILED):
            self._release_device()
            return

        self.logger.info(f"Aborting recording session: {reason}")
        error = RecordingAbortedError(f"Recording aborted: {reason}")

        if self.device.is_recording():
            try:
                self.device.request_stop()
            except Exception as e:
                self.logger.warning(f"Error requesting device stop on abort: {e}")

        self._fail(error)

    # =========================================================================
    # DEVICE CALLBACKS
    # =========================================================================

    def _handle_chunk(self, data: bytes) -> None:
        if not data:
            return

        if not self._machine.is_in(RecordingState.ACTIVE, RecordingState.STOPPING):
            self.logger.debug(f"Dropping {len(data)} byte chunk in state {self.state.value}")
            return

        self._chunks.append(data)

    def _handle_device_stopped(self) -> None:
        if self._flushed is not None and not self._flushed.done():
            self._flushed.set_result(None)
            return

        if self.state == RecordingState.ACTIVE:
            self._fail(RecordingDeviceError("Recording device stopped unexpectedly"))

    def _handle_device_error(self, error: Exception) -> None:
        if self._machine.is_in(RecordingState.STOPPED, RecordingState.FAILED):
            self.logger.debug(f"Ignoring device error after session end: {error}")
            return

        self._fail(RecordingDeviceError(f"Recording device failed: {error}"))

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _fail(self, error: RecordingError) -> None:
        """Move to FAILED, release the device and notify"""
        self._error = error

        if self._flushed is not None and not self._flushed.done():
            self._flushed.set_exception(error)

        self._release_device()

        if self._machine.can_transition(RecordingState.FAILED):
            self._machine.transition_to(RecordingState.FAILED, str(error))

        self._trigger_error_callback(str(error))

    def _release_device(self) -> None:
        """Stop every track of the held stream; idempotent"""
        if self._stream is None:
            return

        stream, self._stream = self._stream, None
        try:
            released = stream.stop_all_tracks()
            self.logger.info(f"Released {released} device track(s)")
        except Exception as e:
            self.logger.error(f"Error releasing device tracks: {e}")

    def _on_machine_state_change(self, old: Enum, new: Enum, reason: str) -> None:
        if self.on_state_change:
            try:
                self.on_state_change(old, new)
            except Exception as e:
                self.logger.error(f"Error in state change callback: {e}")

    def _trigger_error_callback(self, error_message: str) -> None:
        """Trigger on_error callback"""
        if self.on_error:
            try:
                self.on_error(error_message)
            except Exception as e:
                self.logger.error(f"Error in error callback: {e}")

    # =========================================================================
    # STATUS AND INFO
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """
        Get complete session status.

        Returns:
            Dictionary with status information
        """
        return {
            "mode": self.mode.value,
            "state": self.state.value,
            "elapsed_seconds": self.elapsed_seconds,
            "chunk_count": len(self._chunks),
            "bytes_recorded": sum(len(chunk) for chunk in self._chunks),
            "device_held": self._stream is not None,
            "error": self.error_message,
        }
