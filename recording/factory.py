"""
Recording Factory

Factory pattern for creating capture device implementations.
Automatically selects real or mock capture based on availability.

Single place to decide implementation.
"""

import logging
from typing import Literal

from recording.constants import RecordingMode
from recording.controllers.recording_session import RecordingSession
from recording.implementations.ffmpeg_capture import FFmpegCaptureDevice
from recording.implementations.mock_capture import MockCaptureDevice
from recording.interfaces.capture_device_interface import CaptureDeviceInterface

# Type alias for better type hints
CaptureMode = Literal["auto", "real", "mock"]


class RecordingFactory:
    """
    Factory for creating capture devices.

    Usage:
        # Auto-detect (uses FFmpeg if available, mock otherwise)
        device = RecordingFactory.create_device()

        # Force mock mode (useful for testing)
        device = RecordingFactory.create_device(mode="mock")

        # Force real capture (raises error if not available)
        device = RecordingFactory.create_device(mode="real")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_device(
        cls,
        mode: CaptureMode = "auto",
        simulate_timing: bool = True,
        recording_mode: RecordingMode = RecordingMode.VIDEO,
    ) -> CaptureDeviceInterface:
        """
        Create a capture device instance.

        Args:
            mode: "auto" (detect), "real" (force FFmpeg), "mock" (force mock)
            simulate_timing: For mock capture, whether chunks are emitted
                           on a real timer (only used for mock devices)
            recording_mode: What will be recorded; audio needs no camera

        Returns:
            CaptureDeviceInterface implementation

        Raises:
            RuntimeError: If mode="real" but FFmpeg or a needed device is missing
        """
        if mode == "mock":
            cls._logger.info(f"Creating Mock Capture Device (simulate_timing: {simulate_timing})")
            return MockCaptureDevice(simulate_timing=simulate_timing)

        if mode == "real":
            device = FFmpegCaptureDevice()
            if not device.is_available(recording_mode):
                raise RuntimeError(
                    f"Real {recording_mode.value} capture requested but FFmpeg or device not available",
                )
            cls._logger.info("Creating FFmpeg Capture Device (forced)")
            return device

        # mode == "auto" - try real first, fall back to mock
        device = FFmpegCaptureDevice()
        if device.is_available(recording_mode):
            cls._logger.info("Creating FFmpeg Capture Device (auto-detected)")
            return device

        cls._logger.warning(
            f"FFmpeg or {recording_mode.value} device not available, using Mock Capture Device",
        )
        return MockCaptureDevice(simulate_timing=simulate_timing)

    @classmethod
    def create_session(
        cls,
        recording_mode: RecordingMode,
        device: CaptureDeviceInterface,
    ) -> RecordingSession:
        """Create a recording session bound to `device`"""
        return RecordingSession(device, recording_mode)


# Convenience functions for quick creation

def create_capture_device(force_mock: bool = False, fast_mode: bool = False) -> CaptureDeviceInterface:
    """
    Quick device creation with simple options.

    Args:
        force_mock: If True, always use mock
        fast_mode: If True and using mock, chunks are only emitted manually

    Example:
        # Fast tests
        device = create_capture_device(force_mock=True, fast_mode=True)
    """
    mode: CaptureMode = "mock" if force_mock else "auto"
    return RecordingFactory.create_device(mode=mode, simulate_timing=not fast_mode)
