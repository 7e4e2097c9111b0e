"""
Media Utilities

Helper functions for stitching: container detection, media type guessing,
and FFmpeg concat-list formatting.
"""

import mimetypes
from typing import Sequence
from urllib.parse import urlparse

from core.media import MediaArtifact

# Fallbacks for types missing from the platform mimetypes table
_EXTRA_TYPES = {
    ".webm": "video/webm",
    ".mp4": "video/mp4",
    ".png": "image/png",
    ".jpg": "image/jpeg",
}


def container_of(artifact: MediaArtifact) -> str:
    """
    Container format of an artifact, from its media type.

    Example:
        container_of(MediaArtifact(b"", "audio/webm;codecs=opus"))  # "webm"
    """
    return artifact.extension.lower()


def share_container(inputs: Sequence[MediaArtifact]) -> bool:
    """True if every input uses the same container (stream copy possible)"""
    return len({container_of(a) for a in inputs}) <= 1


def guess_mime_type(source: str, default: str = "application/octet-stream") -> str:
    """
    Media type of a URL or path, from its extension.

    Example:
        guess_mime_type("https://host/feedback_videos/question1.mp4")  # "video/mp4"
    """
    path = urlparse(source).path if "://" in source else source
    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        return guessed

    for suffix, mime in _EXTRA_TYPES.items():
        if path.lower().endswith(suffix):
            return mime
    return default


def build_concat_list(file_names: Sequence[str]) -> str:
    """
    FFmpeg concat demuxer list, one entry per line.

    Example:
        build_concat_list(["input0.mp4", "input1.mp4"])
        # "file 'input0.mp4'\\nfile 'input1.mp4'\\n"
    """
    lines = []
    for name in file_names:
        escaped = name.replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    return "\n".join(lines) + "\n"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "42.3 MB", "1.2 GB")
    """
    if size_bytes <= 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
