"""
Capture Device Interface

Abstract interface for media capture devices.
Defines the contract that any capture backend must follow.

The RecordingSession depends on this abstraction, not on FFmpeg directly,
so tests can drive a session with MockCaptureDevice.

A device works in two phases:
1. open_stream() acquires camera/microphone and returns a LiveStream
   holding one MediaTrack per acquired device
2. start_recording() begins emitting encoded chunks on a fixed cadence
   until request_stop() is called, after which the device flushes a
   final chunk and signals on_stop exactly once
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from recording.constants import DeviceErrorKind, RecordingMode

# Callback type aliases
ChunkCallback = Callable[[bytes], None]
StopCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


class MediaTrack(ABC):
    """One acquired input (camera or microphone) of a live stream"""

    def __init__(self, kind: str, label: str = ""):
        self.kind = kind  # "video" or "audio"
        self.label = label

    @property
    @abstractmethod
    def is_live(self) -> bool:
        """True until the track has been stopped"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """
        Release the underlying device.

        Must be idempotent: stopping an already stopped track is a no-op.
        """
        pass

    def __repr__(self) -> str:
        state = "live" if self.is_live else "ended"
        return f"{self.__class__.__name__}({self.kind}, {self.label!r}, {state})"


class LiveStream:
    """
    Set of live tracks returned by a device grant.

    Example:
        stream = await device.open_stream(RecordingMode.VIDEO)
        stream.kinds  # ["video", "audio"]
        stream.stop_all_tracks()
    """

    def __init__(self, tracks: List[MediaTrack]):
        self.tracks = list(tracks)

    @property
    def kinds(self) -> List[str]:
        return [track.kind for track in self.tracks]

    @property
    def active(self) -> bool:
        """True while at least one track is still live"""
        return any(track.is_live for track in self.tracks)

    def stop_all_tracks(self) -> int:
        """
        Stop every live track.

        Returns:
            Number of tracks that were live and are now stopped
        """
        stopped = 0
        for track in self.tracks:
            if track.is_live:
                track.stop()
                stopped += 1
        return stopped


class CaptureDeviceInterface(ABC):
    """
    Abstract base class for capture devices.

    Any capture backend (FFmpeg, GStreamer, a browser bridge, etc.)
    must implement all these methods to work with RecordingSession.
    """

    @abstractmethod
    async def open_stream(self, mode: RecordingMode) -> LiveStream:
        """
        Acquire the devices needed for a recording mode.

        VIDEO mode acquires camera and microphone, AUDIO mode the
        microphone only.

        Returns:
            LiveStream with one track per acquired device

        Raises:
            PermissionDeniedError: Access to a device was refused
            DeviceNotFoundError: A required device is missing
            DeviceBusyError: A device is held by another application
            CaptureError: Any other acquisition failure
        """
        pass

    @abstractmethod
    def start_recording(
        self,
        stream: LiveStream,
        timeslice: float,
        on_chunk: ChunkCallback,
        on_stop: StopCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Begin emitting encoded chunks from an open stream.

        This should be NON-BLOCKING - chunks are delivered through
        on_chunk roughly every `timeslice` seconds from a background task.

        Args:
            stream: Stream returned by open_stream()
            timeslice: Seconds between chunk emissions
            on_chunk: Receives each non-empty encoded chunk, in order
            on_stop: Called once after the final chunk has been flushed
            on_error: Called if the device fails while recording

        Raises:
            CaptureError: If recording cannot begin
        """
        pass

    @abstractmethod
    def request_stop(self) -> None:
        """
        Ask the device to stop recording.

        Returns immediately. The device flushes any buffered data as a
        final chunk and then calls on_stop. A device that already stopped
        ignores the request.
        """
        pass

    @abstractmethod
    def is_recording(self) -> bool:
        """Check if the device is currently emitting chunks"""
        pass

    @abstractmethod
    def is_available(self, mode: RecordingMode = RecordingMode.VIDEO) -> bool:
        """
        Check if the capture backend can record `mode`.

        Should check that the capture software is installed and the
        devices `mode` needs are present (no camera for audio).
        Does not acquire anything.
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """
        Stop any active recording and release resources.

        This should never raise exceptions.
        """
        pass


class CaptureError(Exception):
    """
    Exception raised for capture errors.

    Examples:
    - FFmpeg not installed
    - Capture process crashed
    - Device refused access
    """
    pass


class DeviceAccessError(CaptureError):
    """Device acquisition failed. `kind` drives the user-facing message."""

    kind = DeviceErrorKind.OTHER


class PermissionDeniedError(DeviceAccessError):
    """Access to camera or microphone was refused"""

    kind = DeviceErrorKind.PERMISSION_DENIED


class DeviceNotFoundError(DeviceAccessError):
    """Required camera or microphone is not present"""

    kind = DeviceErrorKind.DEVICE_NOT_FOUND


class DeviceBusyError(DeviceAccessError):
    """Device is already in use by another application"""

    kind = DeviceErrorKind.DEVICE_BUSY


class CaptureProcessError(CaptureError):
    """Error in capture process (FFmpeg crashed, etc.)"""
    pass


def classify_device_error(error: BaseException) -> DeviceErrorKind:
    """Map any acquisition exception to a DeviceErrorKind"""
    if isinstance(error, DeviceAccessError):
        return error.kind
    if isinstance(error, PermissionError):
        return DeviceErrorKind.PERMISSION_DENIED
    if isinstance(error, FileNotFoundError):
        return DeviceErrorKind.DEVICE_NOT_FOUND
    return DeviceErrorKind.OTHER
