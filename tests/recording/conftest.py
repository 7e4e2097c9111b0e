"""
Recording Test Configuration and Fixtures

Shared fixtures for recording module tests.
"""

import pytest

from recording.constants import RecordingMode
from recording.controllers.recording_session import RecordingSession
from recording.implementations.mock_capture import MockCaptureDevice

# =============================================================================
# DEVICE FIXTURES
# =============================================================================


@pytest.fixture
def mock_device_fast():
    """
    Provide MockCaptureDevice without timing simulation (fast tests).

    Chunks are only delivered through emit_chunk().

    Usage:
        async def test_chunks(mock_device_fast):
            mock_device_fast.emit_chunk()
    """
    device = MockCaptureDevice(simulate_timing=False)
    yield device
    device.cleanup()


@pytest.fixture
def mock_device_realistic():
    """
    Provide MockCaptureDevice emitting chunks on a real timer.

    Use with a short chunk_interval to keep tests fast.
    """
    device = MockCaptureDevice(simulate_timing=True)
    yield device
    device.cleanup()


# =============================================================================
# RECORDING SESSION FIXTURES
# =============================================================================


@pytest.fixture
def video_session(mock_device_fast, fake_clock):
    """
    Provide a VIDEO RecordingSession on a fast mock device.

    Usage:
        async def test_session(video_session):
            await video_session.start()
    """
    session = RecordingSession(
        mock_device_fast,
        RecordingMode.VIDEO,
        stop_timeout=0.2,
        clock=fake_clock,
    )
    return session


@pytest.fixture
def audio_session(mock_device_fast, fake_clock):
    """Provide an AUDIO RecordingSession on a fast mock device"""
    session = RecordingSession(
        mock_device_fast,
        RecordingMode.AUDIO,
        stop_timeout=0.2,
        clock=fake_clock,
    )
    return session
