"""
Recording Constants

Enums, state tables, user-facing device messages and FFmpeg command
construction for the continuous recording session.

Configuration values (chunk cadence, timeouts, devices, codecs) live in
config/settings.py; this module re-exports what the recording package uses.
"""

from enum import Enum
from pathlib import Path

from config.settings import (
    AUDIO_INPUT_DEVICE,
    AUDIO_INPUT_FORMAT,
    AUDIO_RECORDING_MIME_TYPE,
    CAPTURE_AUDIO_BITRATE,
    CAPTURE_AUDIO_CODEC,
    CAPTURE_READ_SIZE,
    CAPTURE_VIDEO_CODEC,
    CAPTURE_VIDEO_FPS,
    CAPTURE_VIDEO_HEIGHT,
    CAPTURE_VIDEO_WIDTH,
    DEFAULT_CAMERA_DEVICE,
    FFMPEG_LOG_LEVEL,
    RECORDING_CHUNK_INTERVAL,
    RECORDING_STOP_TIMEOUT,
    VIDEO_INPUT_FORMAT,
    VIDEO_RECORDING_MIME_TYPE,
)

__all__ = [
    "CAPTURE_READ_SIZE",
    "CAPTURE_READ_TIMEOUT",
    "CAPTURE_WARMUP_TIME",
    "FORCE_KILL_TIMEOUT",
    "DEFAULT_CAMERA_DEVICE",
    "DeviceErrorKind",
    "RECORDING_CHUNK_INTERVAL",
    "RECORDING_STOP_TIMEOUT",
    "RECORDING_TRANSITIONS",
    "RecordingMode",
    "RecordingState",
    "THREAD_QUEUE_SIZE",
    "format_duration",
    "get_device_error_message",
    "get_ffmpeg_capture_command",
    "get_mime_type",
    "validate_camera_device",
]


# =============================================================================
# RECORDING MODES
# =============================================================================


class RecordingMode(Enum):
    """Media captured by a session. Text feedback never records."""

    VIDEO = "video"  # camera + microphone
    AUDIO = "audio"  # microphone only


_MIME_TYPES = {
    RecordingMode.VIDEO: VIDEO_RECORDING_MIME_TYPE,
    RecordingMode.AUDIO: AUDIO_RECORDING_MIME_TYPE,
}


def get_mime_type(mode: RecordingMode) -> str:
    """Media type the final recording is tagged with"""
    return _MIME_TYPES[mode]


# =============================================================================
# RECORDING STATE TRACKING
# =============================================================================


class RecordingState(Enum):
    """
    States a recording session can be in.

    Lifecycle: IDLE -> REQUESTING_DEVICE -> ACTIVE -> STOPPING -> STOPPED
    FAILED is reachable from every non-terminal state.
    """

    IDLE = "idle"  # Created, device not requested yet
    REQUESTING_DEVICE = "requesting-device"  # Waiting for device grant
    ACTIVE = "active"  # Chunks are accumulating
    STOPPING = "stopping"  # Waiting for the device to flush
    STOPPED = "stopped"  # Final artifact available (terminal)
    FAILED = "failed"  # Terminal error, device released


RECORDING_TRANSITIONS = {
    RecordingState.IDLE: {RecordingState.REQUESTING_DEVICE, RecordingState.FAILED},
    RecordingState.REQUESTING_DEVICE: {RecordingState.ACTIVE, RecordingState.FAILED},
    RecordingState.ACTIVE: {RecordingState.STOPPING, RecordingState.FAILED},
    RecordingState.STOPPING: {RecordingState.STOPPED, RecordingState.FAILED},
    RecordingState.STOPPED: set(),
    RecordingState.FAILED: set(),
}


# =============================================================================
# DEVICE ERRORS
# =============================================================================


class DeviceErrorKind(Enum):
    """
    Classification of device access failures.

    Used for category-specific user feedback.
    """

    PERMISSION_DENIED = "permission_denied"
    DEVICE_NOT_FOUND = "device_not_found"
    DEVICE_BUSY = "device_busy"
    OTHER = "other"


def get_device_error_message(
    kind: DeviceErrorKind,
    mode: RecordingMode,
    detail: str = "",
) -> str:
    """
    Build the user-facing message for a device access failure.

    Example:
        get_device_error_message(DeviceErrorKind.DEVICE_BUSY, RecordingMode.AUDIO)
        -> "Microphone is being used by another application."
    """
    video = mode == RecordingMode.VIDEO

    if kind == DeviceErrorKind.PERMISSION_DENIED:
        devices = "Camera and microphone" if video else "Microphone"
        return f"{devices} permission denied. Please allow access and refresh the page."

    if kind == DeviceErrorKind.DEVICE_NOT_FOUND:
        devices = "camera or microphone" if video else "microphone"
        return (
            f"No {devices} found. "
            f"Please connect the required device and refresh."
        )

    if kind == DeviceErrorKind.DEVICE_BUSY:
        devices = "Camera or microphone" if video else "Microphone"
        return f"{devices} is being used by another application."

    return f"Failed to start recording: {detail}" if detail else "Failed to start recording"


# =============================================================================
# FFMPEG CAPTURE CONFIGURATION
# =============================================================================

# Input queue for each capture device, absorbs USB timing jitter
THREAD_QUEUE_SIZE = 512

# How long a single stdout read may block before the chunk timer is checked
CAPTURE_READ_TIMEOUT = 0.25

# Time FFmpeg gets to open devices before the grant is confirmed
CAPTURE_WARMUP_TIME = 0.5

# Wait after SIGTERM before the capture process is killed
FORCE_KILL_TIMEOUT = 5.0


def get_ffmpeg_capture_command(
    mode: RecordingMode,
    camera_device: str = DEFAULT_CAMERA_DEVICE,
    audio_device: str = AUDIO_INPUT_DEVICE,
    width: int = CAPTURE_VIDEO_WIDTH,
    height: int = CAPTURE_VIDEO_HEIGHT,
    fps: int = CAPTURE_VIDEO_FPS,
) -> list[str]:
    """
    Generate FFmpeg command streaming a WebM recording to stdout.

    Output goes to pipe:1 so the capture device can slice it into
    chunks while recording is still running.

    Example:
        cmd = get_ffmpeg_capture_command(RecordingMode.AUDIO)
        await asyncio.create_subprocess_exec(*cmd, stdout=PIPE)
    """
    command = ["ffmpeg", "-hide_banner"]

    if mode == RecordingMode.VIDEO:
        command.extend(
            [
                "-f",
                VIDEO_INPUT_FORMAT,
                "-framerate",
                str(fps),
                "-video_size",
                f"{width}x{height}",
                "-thread_queue_size",
                str(THREAD_QUEUE_SIZE),
                "-i",
                camera_device,
            ],
        )

    command.extend(
        [
            "-f",
            AUDIO_INPUT_FORMAT,
            "-thread_queue_size",
            str(THREAD_QUEUE_SIZE),
            "-i",
            audio_device,
        ],
    )

    if mode == RecordingMode.VIDEO:
        command.extend(
            [
                "-c:v",
                CAPTURE_VIDEO_CODEC,
                "-deadline",
                "realtime",
                "-b:v",
                "1M",
            ],
        )

    command.extend(
        [
            "-c:a",
            CAPTURE_AUDIO_CODEC,
            "-b:a",
            CAPTURE_AUDIO_BITRATE,
            "-f",
            "webm",
            "-loglevel",
            FFMPEG_LOG_LEVEL,
            "pipe:1",
        ],
    )

    return command


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Example:
        format_duration(630) -> "10:30"
        format_duration(45) -> "0:45"
    """
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def validate_camera_device(device_path: str) -> bool:
    """Check if camera device exists and is a character device"""
    device = Path(device_path)
    return device.exists() and device.is_char_device()
