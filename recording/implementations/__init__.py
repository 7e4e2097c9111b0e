"""
Recording Implementations Package

Exposes concrete implementations of recording interfaces.
"""

from recording.implementations.ffmpeg_capture import FFmpegCaptureDevice
from recording.implementations.mock_capture import MockCaptureDevice, MockTrack

# Public API
__all__ = [
    "FFmpegCaptureDevice",
    "MockCaptureDevice",
    "MockTrack",
]
