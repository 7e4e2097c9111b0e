"""
Stitching Constants

Configuration for assembling the final feedback media.
Tunables are re-exported from config/settings.py.
"""

from pathlib import Path
from typing import List, Optional

from config.settings import (
    FFMPEG_LOG_LEVEL,
    LOCAL_PROMPT_MEDIA_DIR,
    PLACEHOLDER_IMAGE,
    PROMPT_CLIP_FILES,
    PROMPT_FETCH_ATTEMPTS,
    PROMPT_FETCH_RETRY_DELAY,
    PROMPT_FETCH_TIMEOUT,
    PROMPT_MEDIA_BASE_URL,
    PROMPT_MEDIA_BUCKET_PATH,
    STITCH_AUDIO_BITRATE,
    STITCH_AUDIO_CODEC,
    STITCH_OUTPUT_MIME_TYPE,
    STITCH_TIMEOUT,
    STITCH_VIDEO_CODEC,
    STITCH_VIDEO_HEIGHT,
    STITCH_VIDEO_PRESET,
    STITCH_VIDEO_WIDTH,
)

__all__ = [
    "FFMPEG_LOG_LEVEL",
    "LOCAL_PROMPT_MEDIA_DIR",
    "PLACEHOLDER_IMAGE",
    "PROMPT_CLIP_FILES",
    "PROMPT_FETCH_ATTEMPTS",
    "PROMPT_FETCH_RETRY_DELAY",
    "PROMPT_FETCH_TIMEOUT",
    "PROMPT_MEDIA_BASE_URL",
    "RETRYABLE_FETCH_STATUSES",
    "STITCH_AUDIO_BITRATE",
    "STITCH_AUDIO_CODEC",
    "STITCH_FRAME_RATE",
    "STITCH_AUDIO_SAMPLE_RATE",
    "STITCH_OUTPUT_MIME_TYPE",
    "STITCH_PIXEL_FORMAT",
    "STITCH_TIMEOUT",
    "STITCH_VIDEO_CODEC",
    "STITCH_VIDEO_HEIGHT",
    "STITCH_VIDEO_PRESET",
    "STITCH_VIDEO_WIDTH",
    "get_prompt_clip_sources",
]

# =============================================================================
# RE-ENCODE NORMALIZATION
# =============================================================================

# Inputs are normalized to these before a re-encoding concat
STITCH_FRAME_RATE = 30
STITCH_AUDIO_SAMPLE_RATE = 48000
STITCH_PIXEL_FORMAT = "yuv420p"

# HTTP statuses worth another fetch attempt
RETRYABLE_FETCH_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def get_prompt_clip_sources(
    base_url: Optional[str] = PROMPT_MEDIA_BASE_URL,
    local_dir: Path = LOCAL_PROMPT_MEDIA_DIR,
    files: Optional[List[str]] = None,
) -> List[str]:
    """
    Ordered prompt clip locations.

    Public object storage when a base URL is configured, the local media
    directory otherwise.

    Example:
        get_prompt_clip_sources("https://media.example.com")
        -> ["https://media.example.com/storage/v1/object/public/feedback_videos/question1.mp4", ...]
    """
    names = files if files is not None else PROMPT_CLIP_FILES
    if base_url:
        root = base_url.rstrip("/")
        return [f"{root}/{PROMPT_MEDIA_BUCKET_PATH}/{name}" for name in names]
    return [str(Path(local_dir) / name) for name in names]
