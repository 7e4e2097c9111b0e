"""
Resumable Protocol Utilities

Pure helpers for the header formats and timing rules of the resumable
upload protocol. Kept free of I/O so they can be tested in isolation.
"""

import math
import re
from datetime import datetime, timezone
from typing import Optional

# "bytes=0-1048575" as sent back by the server on 308
_RANGE_PATTERN = re.compile(r"^\s*bytes=(\d+)-(\d+)\s*$")


def format_content_range(start: int, end: int, total: int) -> str:
    """
    Content-Range for a chunk covering bytes start..end (inclusive).

    Example:
        format_content_range(0, 5242879, 12582912)
        -> "bytes 0-5242879/12582912"
    """
    return f"bytes {start}-{end}/{total}"


def format_status_range(total: int) -> str:
    """Content-Range of a zero-length status check"""
    return f"bytes */{total}"


def parse_range_header(value: Optional[str]) -> Optional[int]:
    """
    Next byte offset implied by a server Range header.

    Returns:
        N + 1 for "bytes=0-N", None when the header is missing

    Raises:
        ValueError: If the header is present but malformed

    Example:
        parse_range_header("bytes=0-1048575") -> 1048576
    """
    if value is None:
        return None

    match = _RANGE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Malformed Range header: {value!r}")

    return int(match.group(2)) + 1


def backoff_delay(retries: int, base_delay: float) -> float:
    """
    Wait before the next attempt after `retries` consecutive failures.

    Example:
        [backoff_delay(n, 1.0) for n in (1, 2, 3, 4)] -> [1.0, 2.0, 4.0, 8.0]
    """
    return base_delay * (2 ** (retries - 1))


def progress_percent(confirmed: int, total: int) -> int:
    """Whole percent confirmed, halves rounded up"""
    if total <= 0:
        return 0
    return int(math.floor(confirmed * 100 / total + 0.5))


def format_timestamp(when: datetime) -> str:
    """
    ISO 8601 UTC timestamp with millisecond precision.

    Example:
        format_timestamp(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        -> "2025-01-02T03:04:05.000Z"
    """
    when = when.astimezone(timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.") + f"{when.microsecond // 1000:03d}Z"


def build_remote_name(base_name: str, extension: str, when: datetime) -> str:
    """
    Remote file name with a filesystem-safe timestamp suffix.

    Example:
        build_remote_name("video_stitched_1700000000000", "mp4", when)
        -> "video_stitched_1700000000000_2025-01-02T03-04-05-000Z.mp4"
    """
    stamp = format_timestamp(when).replace(":", "-").replace(".", "-")
    return f"{base_name}_{stamp}.{extension}"
