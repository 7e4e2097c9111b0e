"""
Recording Module

Continuous audio/video capture for one feedback session.

Provides automatic detection and graceful fallback between real FFmpeg
capture and mock implementations for testing.

Public API:
    - RecordingFactory: Factory for creating capture devices
    - create_capture_device: Quick device creation with auto-detection
    - RecordingSession: Session lifecycle, chunk accumulation and stop
    - CaptureDeviceInterface: Capture contract
    - RecordingError, CaptureError: Custom exceptions
    - RecordingMode, RecordingState: Enumerations

Usage:
    from recording import RecordingMode, RecordingSession, create_capture_device

    session = RecordingSession(create_capture_device(), RecordingMode.AUDIO)
    await session.start()
    # ... answer prompts ...
    artifact = await session.stop()
"""

from recording.constants import DeviceErrorKind, RecordingMode, RecordingState
from recording.controllers.recording_session import (
    RecordingAbortedError,
    RecordingDeviceError,
    RecordingError,
    RecordingNotStoppedError,
    RecordingSession,
    RecordingStartError,
    RecordingStateError,
    RecordingStopTimeoutError,
)
from recording.factory import RecordingFactory, create_capture_device
from recording.interfaces.capture_device_interface import (
    CaptureDeviceInterface,
    CaptureError,
    DeviceAccessError,
    DeviceBusyError,
    DeviceNotFoundError,
    LiveStream,
    PermissionDeniedError,
)

__all__ = [
    "CaptureDeviceInterface",
    "CaptureError",
    "DeviceAccessError",
    "DeviceBusyError",
    "DeviceErrorKind",
    "DeviceNotFoundError",
    "LiveStream",
    "PermissionDeniedError",
    "RecordingAbortedError",
    "RecordingDeviceError",
    "RecordingError",
    "RecordingFactory",
    "RecordingMode",
    "RecordingNotStoppedError",
    "RecordingSession",
    "RecordingStartError",
    "RecordingState",
    "RecordingStateError",
    "RecordingStopTimeoutError",
    "create_capture_device",
]
