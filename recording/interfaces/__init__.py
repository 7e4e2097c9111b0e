"""
Recording Interfaces Package

Exposes abstract interfaces for recording components.
"""

from recording.interfaces.capture_device_interface import (
    CaptureDeviceInterface,
    CaptureError,
    CaptureProcessError,
    DeviceAccessError,
    DeviceBusyError,
    DeviceNotFoundError,
    LiveStream,
    MediaTrack,
    PermissionDeniedError,
    classify_device_error,
)

# Public API
__all__ = [
    # Interface
    "CaptureDeviceInterface",
    "LiveStream",
    "MediaTrack",
    # Exceptions
    "CaptureError",
    "CaptureProcessError",
    "DeviceAccessError",
    "DeviceBusyError",
    "DeviceNotFoundError",
    "PermissionDeniedError",
    "classify_device_error",
]
