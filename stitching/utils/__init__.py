"""
Stitching Utilities Package
"""

from stitching.utils.media_utils import (
    build_concat_list,
    container_of,
    format_file_size,
    guess_mime_type,
    share_container,
)

__all__ = [
    "build_concat_list",
    "container_of",
    "format_file_size",
    "guess_mime_type",
    "share_container",
]
