"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Secrets (OAuth tokens, folder ids) should be in .env, NOT here
- Import these settings in modules: from config.settings import UPLOAD_CHUNK_SIZE
- Package constants.py files re-export what they need from here
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# RECORDING CONFIGURATION
# =============================================================================

# Capture device emits one chunk per interval while recording (seconds)
RECORDING_CHUNK_INTERVAL = 1.0

# Max wait for the device to flush its final chunk after stop (seconds)
# Tracks are released after this even if the device never answers
RECORDING_STOP_TIMEOUT = float(os.getenv("RECORDING_STOP_TIMEOUT", "5.0"))

# Media types of the continuous recording, per mode
VIDEO_RECORDING_MIME_TYPE = "video/webm"
AUDIO_RECORDING_MIME_TYPE = "audio/webm"

# Capture devices used by the FFmpeg capture implementation
DEFAULT_CAMERA_DEVICE = os.getenv("CAMERA_DEVICE", "/dev/video0")
AUDIO_INPUT_DEVICE = os.getenv("AUDIO_INPUT_DEVICE", "default")  # PulseAudio
AUDIO_INPUT_FORMAT = "pulse"
VIDEO_INPUT_FORMAT = "v4l2"

# Capture encoding (WebM container so chunks can be streamed from stdout)
CAPTURE_VIDEO_WIDTH = 1280
CAPTURE_VIDEO_HEIGHT = 720
CAPTURE_VIDEO_FPS = 30
CAPTURE_VIDEO_CODEC = "libvpx"
CAPTURE_AUDIO_CODEC = "libopus"
CAPTURE_AUDIO_BITRATE = "128k"
CAPTURE_READ_SIZE = 64 * 1024  # bytes per stdout read

# =============================================================================
# UPLOAD CONFIGURATION
# =============================================================================

# Google Drive resumable upload endpoint
DRIVE_UPLOAD_URL = (
    "https://www.googleapis.com/upload/drive/v3/files?uploadType=resumable"
)
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]

# Resumable transfer tuning
UPLOAD_CHUNK_SIZE = 5 * 1024 * 1024  # 5 MiB per PUT
UPLOAD_MAX_RETRIES = 5
UPLOAD_RETRY_BASE_DELAY = 1.0  # seconds, doubled per consecutive failure

# Per-request timeouts (seconds)
UPLOAD_INITIATE_TIMEOUT = 30.0
UPLOAD_CHUNK_TIMEOUT = 300.0  # chunks can be large on slow links
UPLOAD_STATUS_TIMEOUT = 30.0

# Destination folders: consenting feedback goes to the social folder
DRIVE_SOCIAL_FOLDER_ID = os.getenv("DRIVE_SOCIAL_FOLDER_ID", "")
DRIVE_PRIVATE_FOLDER_ID = os.getenv("DRIVE_PRIVATE_FOLDER_ID", "")

# =============================================================================
# STITCHING CONFIGURATION
# =============================================================================

# Prompt clips are served from public object storage
PROMPT_MEDIA_BASE_URL = os.getenv("PROMPT_MEDIA_BASE_URL", "")
PROMPT_MEDIA_BUCKET_PATH = "storage/v1/object/public/feedback_videos"
LOCAL_PROMPT_MEDIA_DIR = Path(os.getenv("LOCAL_PROMPT_MEDIA_DIR", "./media/videos"))
PROMPT_CLIP_FILES = [
    "question1.mp4",
    "question2.mp4",
    "question3.mp4",
    "question4.mp4",
    "question5.mp4",
]

# Still image shown behind audio-only feedback
PLACEHOLDER_IMAGE = os.getenv(
    "PLACEHOLDER_IMAGE",
    "./media/images/microphone_background.png",
)

# Prompt fetching
PROMPT_FETCH_TIMEOUT = 60.0  # seconds
PROMPT_FETCH_ATTEMPTS = 3
PROMPT_FETCH_RETRY_DELAY = 1.0  # seconds, doubled per attempt

# Output encoding (used only when stream copy is impossible)
STITCH_OUTPUT_MIME_TYPE = "video/mp4"
STITCH_VIDEO_CODEC = "libx264"
STITCH_VIDEO_PRESET = "veryfast"
STITCH_AUDIO_CODEC = "aac"
STITCH_AUDIO_BITRATE = "128k"
STITCH_VIDEO_WIDTH = 1280
STITCH_VIDEO_HEIGHT = 720
STITCH_TIMEOUT = 600.0  # seconds per FFmpeg invocation
FFMPEG_LOG_LEVEL = "error"

# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================

FEEDBACK_DB_PATH = Path(os.getenv("FEEDBACK_DB_PATH", "./data/feedback.db"))

# Text answer validation
MAX_TEXT_RESPONSE_LENGTH = 500
MIN_STAR_RATING = 1
MAX_STAR_RATING = 5

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_DIR = os.getenv("LOG_DIR", "/var/log/feedback-pipeline")
LOG_SERVICE_FILE = "pipeline.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_BACKUP_DAYS = 7

# =============================================================================
# SECRETS (loaded from .env)
# =============================================================================
# IMPORTANT: These should NEVER be committed to version control!

# Google OAuth Configuration (file-based)
GOOGLE_CLIENT_SECRET_PATH = os.getenv(
    "GOOGLE_CLIENT_SECRET_PATH",
    "credentials/client_secret.json",
)
GOOGLE_TOKEN_PATH = os.getenv("GOOGLE_TOKEN_PATH", "credentials/token.json")
