"""
Upload Utilities Package
"""

from upload.utils.protocol_utils import (
    backoff_delay,
    build_remote_name,
    format_content_range,
    format_status_range,
    format_timestamp,
    parse_range_header,
    progress_percent,
)

__all__ = [
    "backoff_delay",
    "build_remote_name",
    "format_content_range",
    "format_status_range",
    "format_timestamp",
    "parse_range_header",
    "progress_percent",
]
