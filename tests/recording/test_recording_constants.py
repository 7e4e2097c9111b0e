"""
Recording Constants Tests

Tests for the pure helpers in recording.constants.

To run:
    pytest tests/recording/test_recording_constants.py -v
"""

import pytest

from recording.constants import (
    DeviceErrorKind,
    RecordingMode,
    format_duration,
    get_device_error_message,
    get_ffmpeg_capture_command,
    get_mime_type,
)


@pytest.mark.unit
def test_mime_type_per_mode():
    """Test recordings are tagged with the mode's media type."""
    assert get_mime_type(RecordingMode.VIDEO) == "video/webm"
    assert get_mime_type(RecordingMode.AUDIO) == "audio/webm"


@pytest.mark.unit
def test_busy_message_audio():
    """Test busy message for the microphone."""
    message = get_device_error_message(DeviceErrorKind.DEVICE_BUSY, RecordingMode.AUDIO)

    assert message == "Microphone is being used by another application."


@pytest.mark.unit
def test_not_found_message_audio():
    """Test not-found message for the microphone."""
    message = get_device_error_message(
        DeviceErrorKind.DEVICE_NOT_FOUND,
        RecordingMode.AUDIO,
    )

    assert message == "No microphone found. Please connect the required device and refresh."


@pytest.mark.unit
def test_other_message_carries_detail():
    """Test uncategorized errors surface the device message."""
    message = get_device_error_message(
        DeviceErrorKind.OTHER,
        RecordingMode.VIDEO,
        "pipeline broke",
    )

    assert message == "Failed to start recording: pipeline broke"


@pytest.mark.unit
def test_audio_capture_command_has_no_camera_input():
    """Test AUDIO capture reads only the microphone."""
    command = get_ffmpeg_capture_command(RecordingMode.AUDIO, camera_device="/dev/video9")

    assert "/dev/video9" not in command
    assert "-c:v" not in command
    assert command[-1] == "pipe:1"
    assert command[command.index("-f", command.index("-c:a")) + 1] == "webm"


@pytest.mark.unit
def test_video_capture_command_reads_camera_and_microphone():
    """Test VIDEO capture has both inputs in order."""
    command = get_ffmpeg_capture_command(
        RecordingMode.VIDEO,
        camera_device="/dev/video2",
        audio_device="mic",
    )

    inputs = [command[i + 1] for i, arg in enumerate(command) if arg == "-i"]
    assert inputs == ["/dev/video2", "mic"]
    assert "-c:v" in command


@pytest.mark.unit
@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (45, "0:45"), (630, "10:30")],
)
def test_format_duration(seconds, expected):
    """Test duration formatting."""
    assert format_duration(seconds) == expected
