"""
Recording Session Tests

Tests for RecordingSession showing:
- Session lifecycle
- Chunk accumulation and final artifact
- Elapsed time tracking and freezing on stop
- Device error classification
- Stop handshake, timeout and abort
- Device release guarantees

To run:
    pytest tests/recording/controllers/test_recording_session.py -v
"""

import asyncio

import pytest

from recording.constants import DeviceErrorKind, RecordingMode, RecordingState
from recording.controllers.recording_session import (
    RecordingAbortedError,
    RecordingNotStoppedError,
    RecordingSession,
    RecordingStartError,
    RecordingStateError,
    RecordingStopTimeoutError,
)
from recording.interfaces.capture_device_interface import (
    CaptureError,
    DeviceBusyError,
    DeviceNotFoundError,
    PermissionDeniedError,
)

# =============================================================================
# INITIALIZATION TESTS
# =============================================================================


@pytest.mark.unit
def test_recording_session_initialization(mock_device_fast):
    """Test recording session initializes correctly."""
    session = RecordingSession(mock_device_fast, RecordingMode.VIDEO)

    assert session.state == RecordingState.IDLE
    assert session.device is mock_device_fast
    assert session.live_stream is None
    assert session.elapsed_seconds == 0
    assert session.chunks == ()


# =============================================================================
# START TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_video_acquires_camera_and_microphone(video_session, mock_device_fast):
    """Test VIDEO mode holds a video and an audio track."""
    await video_session.start()

    assert video_session.state == RecordingState.ACTIVE
    assert video_session.live_stream.kinds == ["video", "audio"]
    assert mock_device_fast.opened_modes == [RecordingMode.VIDEO]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_audio_acquires_microphone_only(audio_session):
    """Test AUDIO mode holds only the microphone."""
    await audio_session.start()

    assert audio_session.live_stream.kinds == ["audio"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cannot_start_twice(video_session):
    """Test a session can only be started once."""
    await video_session.start()

    with pytest.raises(RecordingStateError):
        await video_session.start()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_state_change_callback(video_session, callback_tracker):
    """Test state changes are reported in order."""
    video_session.on_state_change = callback_tracker.track

    await video_session.start()
    await video_session.stop()

    transitions = [(c["args"][0], c["args"][1]) for c in callback_tracker.calls]
    assert transitions == [
        (RecordingState.IDLE, RecordingState.REQUESTING_DEVICE),
        (RecordingState.REQUESTING_DEVICE, RecordingState.ACTIVE),
        (RecordingState.ACTIVE, RecordingState.STOPPING),
        (RecordingState.STOPPING, RecordingState.STOPPED),
    ]


# =============================================================================
# DEVICE ERROR TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "kind", "message"),
    [
        (
            PermissionDeniedError("denied"),
            DeviceErrorKind.PERMISSION_DENIED,
            "Camera and microphone permission denied. "
            "Please allow access and refresh the page.",
        ),
        (
            DeviceNotFoundError("missing"),
            DeviceErrorKind.DEVICE_NOT_FOUND,
            "No camera or microphone found. "
            "Please connect the required device and refresh.",
        ),
        (
            DeviceBusyError("busy"),
            DeviceErrorKind.DEVICE_BUSY,
            "Camera or microphone is being used by another application.",
        ),
        (
            CaptureError("encoder exploded"),
            DeviceErrorKind.OTHER,
            "Failed to start recording: encoder exploded",
        ),
    ],
)
async def test_device_access_errors_are_classified(
    video_session,
    mock_device_fast,
    callback_tracker,
    error,
    kind,
    message,
):
    """Test each device failure maps to its category message."""
    mock_device_fast.simulate_access_error(error)
    video_session.on_error = callback_tracker.track

    with pytest.raises(RecordingStartError) as exc_info:
        await video_session.start()

    assert exc_info.value.kind == kind
    assert str(exc_info.value) == message
    assert video_session.state == RecordingState.FAILED
    assert video_session.error_message == message
    assert callback_tracker.get_all_args() == [message]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_audio_mode_messages_name_microphone(audio_session, mock_device_fast):
    """Test AUDIO mode messages mention only the microphone."""
    mock_device_fast.simulate_access_error(PermissionDeniedError("denied"))

    with pytest.raises(RecordingStartError) as exc_info:
        await audio_session.start()

    assert str(exc_info.value).startswith("Microphone permission denied.")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_recorder_start_failure_releases_tracks(video_session, mock_device_fast):
    """Test tracks are released when the recorder fails after the grant."""
    mock_device_fast.simulate_start_failure(CaptureError("no encoder"))

    with pytest.raises(RecordingStartError):
        await video_session.start()

    assert video_session.state == RecordingState.FAILED
    assert all(t.stop_count == 1 for t in mock_device_fast.last_stream.tracks)


# =============================================================================
# CHUNK AND ARTIFACT TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_final_artifact_is_concatenation_of_chunks(video_session, mock_device_fast):
    """Test final artifact holds every chunk in emission order."""
    await video_session.start()
    for _ in range(3):
        mock_device_fast.emit_chunk()

    artifact = await video_session.stop()

    assert artifact.data == b"chunk-0000;chunk-0001;chunk-0002;final;"
    assert artifact.mime_type == "video/webm"
    assert video_session.final_artifact is artifact
    assert video_session.state == RecordingState.STOPPED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_audio_artifact_media_type(audio_session, mock_device_fast):
    """Test AUDIO recordings are tagged audio/webm."""
    await audio_session.start()
    mock_device_fast.emit_chunk()

    artifact = await audio_session.stop()

    assert artifact.mime_type == "audio/webm"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_chunks_are_ignored(video_session, mock_device_fast):
    """Test zero-length chunks never reach the recording."""
    await video_session.start()
    mock_device_fast.emit_chunk(b"")
    mock_device_fast.emit_chunk(b"a")

    assert video_session.chunks == (b"a",)


@pytest.mark.unit
def test_final_artifact_before_stop_raises(video_session):
    """Test reading the artifact before STOPPED is an error."""
    with pytest.raises(RecordingNotStoppedError):
        _ = video_session.final_artifact


@pytest.mark.unit
@pytest.mark.asyncio
async def test_final_artifact_while_active_raises(video_session):
    """Test reading the artifact while recording is an error."""
    await video_session.start()

    with pytest.raises(RecordingNotStoppedError):
        _ = video_session.final_artifact


# =============================================================================
# ELAPSED TIME TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_elapsed_time_increases_while_active(video_session, fake_clock):
    """Test elapsed seconds follow the clock while active."""
    await video_session.start()

    readings = []
    for _ in range(4):
        readings.append(video_session.elapsed_seconds)
        fake_clock.advance(1.0)

    assert readings == [0, 1, 2, 3]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_duration_frozen_at_stop_request(audio_session, fake_clock):
    """Test duration is the elapsed value when stop was requested."""
    await audio_session.start()
    fake_clock.advance(45.4)

    artifact = await audio_session.stop()
    fake_clock.advance(30)

    assert artifact.duration_seconds == 45.0
    assert audio_session.duration_seconds == 45
    assert audio_session.elapsed_seconds == 45


# =============================================================================
# STOP TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cannot_stop_when_idle(video_session):
    """Test stop is rejected before the session started."""
    with pytest.raises(RecordingStateError):
        await video_session.stop()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stop_releases_every_track_once(video_session, mock_device_fast):
    """Test normal stop releases each track exactly once."""
    await video_session.start()
    stream = video_session.live_stream

    await video_session.stop()

    assert [t.stop_count for t in stream.tracks] == [1, 1]
    assert video_session.live_stream is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_concurrent_stops_share_one_completion(video_session, mock_device_fast):
    """Test two stop calls resolve to the same artifact with one device stop."""
    await video_session.start()
    mock_device_fast.emit_chunk()

    first, second = await asyncio.gather(video_session.stop(), video_session.stop())

    assert first is second
    assert mock_device_fast.stop_requests == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stop_after_stopped_returns_same_artifact(video_session):
    """Test stopping a stopped session is a no-op."""
    await video_session.start()
    artifact = await video_session.stop()

    assert await video_session.stop() is artifact


@pytest.mark.unit
@pytest.mark.asyncio
async def test_withheld_stop_signal_times_out_and_releases(video_session, mock_device_fast):
    """Test device tracks are released even if the device never flushes."""
    mock_device_fast.withhold_stop_signal()
    await video_session.start()
    stream = video_session.live_stream

    with pytest.raises(RecordingStopTimeoutError):
        await video_session.stop()

    assert video_session.state == RecordingState.FAILED
    assert not stream.active
    assert [t.stop_count for t in stream.tracks] == [1, 1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_device_failure_while_recording(video_session, mock_device_fast, callback_tracker):
    """Test a device dying mid-recording fails the session."""
    video_session.on_error = callback_tracker.track
    await video_session.start()
    stream = video_session.live_stream

    mock_device_fast.fail_recording()

    assert video_session.state == RecordingState.FAILED
    assert not stream.active
    assert callback_tracker.was_called()


# =============================================================================
# ABORT TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_abort_active_session_releases_and_drops_late_chunks(
    video_session,
    mock_device_fast,
):
    """Test abort releases the device and ignores the device's late flush."""
    await video_session.start()
    mock_device_fast.emit_chunk()
    stream = video_session.live_stream

    video_session.abort("restart")
    await asyncio.sleep(0.01)

    assert video_session.state == RecordingState.FAILED
    assert not stream.active
    assert video_session.chunks == (b"chunk-0000;",)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_abort_during_stop_fails_the_stop(video_session, mock_device_fast):
    """Test a pending stop is rejected when the session is aborted."""
    mock_device_fast.delay_stop_signal(10.0)
    await video_session.start()

    stop_task = asyncio.create_task(video_session.stop())
    await asyncio.sleep(0)
    video_session.abort("restart")

    with pytest.raises(RecordingAbortedError):
        await stop_task


@pytest.mark.unit
@pytest.mark.asyncio
async def test_abort_while_requesting_device_releases_late_grant(
    video_session,
    mock_device_fast,
):
    """Test a grant arriving after abort is released immediately."""
    start_task = asyncio.create_task(video_session.start())
    await asyncio.sleep(0)
    video_session.abort("restart")

    with pytest.raises(RecordingAbortedError):
        await start_task

    assert not mock_device_fast.last_stream.active


@pytest.mark.unit
@pytest.mark.asyncio
async def test_abort_is_idempotent(video_session):
    """Test aborting twice does not raise."""
    await video_session.start()

    video_session.abort("first")
    video_session.abort("second")

    assert video_session.state == RecordingState.FAILED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_device_error_after_stop_is_ignored(video_session, mock_device_fast):
    """Test a late device error cannot fail a stopped session."""
    await video_session.start()
    artifact = await video_session.stop()

    mock_device_fast.fail_recording()

    assert video_session.state == RecordingState.STOPPED
    assert video_session.final_artifact == artifact


# =============================================================================
# STATUS TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_status(video_session, mock_device_fast, fake_clock):
    """Test status dictionary contents."""
    await video_session.start()
    mock_device_fast.emit_chunk(b"1234")
    fake_clock.advance(2)

    status = video_session.get_status()

    assert status["mode"] == "video"
    assert status["state"] == "active"
    assert status["elapsed_seconds"] == 2
    assert status["chunk_count"] == 1
    assert status["bytes_recorded"] == 4
    assert status["device_held"] is True
    assert status["error"] is None
