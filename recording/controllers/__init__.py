"""
Recording Controllers Package

High-level recording controllers that orchestrate capture devices.
"""

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

# Public API
__all__ = [
    "RecordingAbortedError",
    "RecordingDeviceError",
    "RecordingError",
    "RecordingNotStoppedError",
    "RecordingSession",
    "RecordingStartError",
    "RecordingStateError",
    "RecordingStopTimeoutError",
]
