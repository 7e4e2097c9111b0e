"""
Recording Integration Tests

Session + timed mock device working together, the way the pipeline
uses them.

To run:
    pytest tests/recording/test_recording_integration.py -v
"""

import asyncio

import pytest

from recording.constants import RecordingMode, RecordingState
from recording.controllers.recording_session import RecordingSession
from recording.factory import RecordingFactory, create_capture_device
from recording.implementations.ffmpeg_capture import FFmpegCaptureDevice
from recording.implementations.mock_capture import MockCaptureDevice


@pytest.mark.unit_integration
@pytest.mark.asyncio
async def test_timed_recording_round_trip(mock_device_realistic):
    """Test chunks emitted on a timer all land in the final artifact."""
    session = RecordingSession(
        mock_device_realistic,
        RecordingMode.VIDEO,
        chunk_interval=0.01,
    )

    await session.start()
    await asyncio.sleep(0.1)
    artifact = await session.stop()

    assert session.state == RecordingState.STOPPED
    assert artifact.data == b"".join(mock_device_realistic.emitted_chunks)
    assert artifact.data.startswith(b"chunk-0000;")
    assert artifact.data.endswith(b"final;")
    assert not mock_device_realistic.last_stream.active


@pytest.mark.unit_integration
@pytest.mark.asyncio
async def test_slow_flush_within_timeout(mock_device_fast):
    """Test a flush slower than one loop turn still completes."""
    mock_device_fast.delay_stop_signal(0.05)
    session = RecordingSession(mock_device_fast, RecordingMode.AUDIO, stop_timeout=1.0)

    await session.start()
    artifact = await session.stop()

    assert artifact.data == b"final;"


@pytest.mark.unit
def test_factory_mock_mode():
    """Test factory returns a mock device when forced."""
    device = RecordingFactory.create_device(mode="mock", simulate_timing=False)

    assert isinstance(device, MockCaptureDevice)
    assert device.simulate_timing is False


@pytest.mark.unit
def test_create_capture_device_force_mock():
    """Test convenience creation with forced mock."""
    assert isinstance(create_capture_device(force_mock=True), MockCaptureDevice)


@pytest.mark.unit
def test_factory_creates_session(mock_device_fast):
    """Test factory binds a session to the given device."""
    session = RecordingFactory.create_session(RecordingMode.AUDIO, mock_device_fast)

    assert session.device is mock_device_fast
    assert session.mode == RecordingMode.AUDIO


@pytest.fixture
def audio_only_host(monkeypatch):
    """FFmpeg installed, microphone present, no camera"""
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(
        "recording.implementations.ffmpeg_capture.validate_camera_device",
        lambda device: False,
    )


@pytest.mark.unit
def test_ffmpeg_availability_depends_on_mode(audio_only_host):
    """Test audio capture does not require a camera."""
    device = FFmpegCaptureDevice()

    assert device.is_available(RecordingMode.AUDIO) is True
    assert device.is_available(RecordingMode.VIDEO) is False


@pytest.mark.unit
def test_factory_auto_uses_ffmpeg_for_audio_without_camera(audio_only_host):
    """Test an audio run on a camera-less host records for real."""
    device = RecordingFactory.create_device(recording_mode=RecordingMode.AUDIO)

    assert isinstance(device, FFmpegCaptureDevice)


@pytest.mark.unit
def test_factory_auto_falls_back_for_video_without_camera(audio_only_host):
    """Test a video run on a camera-less host gets the mock device."""
    device = RecordingFactory.create_device(
        recording_mode=RecordingMode.VIDEO, simulate_timing=False,
    )

    assert isinstance(device, MockCaptureDevice)


@pytest.mark.unit
def test_factory_real_mode_checks_requested_mode(audio_only_host):
    """Test forced real capture only fails for modes the host cannot record."""
    assert isinstance(
        RecordingFactory.create_device(mode="real", recording_mode=RecordingMode.AUDIO),
        FFmpegCaptureDevice,
    )
    with pytest.raises(RuntimeError, match="video"):
        RecordingFactory.create_device(mode="real", recording_mode=RecordingMode.VIDEO)
