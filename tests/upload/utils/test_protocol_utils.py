"""
Tests for resumable protocol helpers
"""

from datetime import datetime, timedelta, timezone

import pytest

from upload.utils.protocol_utils import (
    backoff_delay,
    build_remote_name,
    format_content_range,
    format_status_range,
    format_timestamp,
    parse_range_header,
    progress_percent,
)

pytestmark = pytest.mark.unit


class TestHeaderFormats:
    def test_content_range(self):
        assert format_content_range(0, 5242879, 12582912) == "bytes 0-5242879/12582912"

    def test_status_range(self):
        assert format_status_range(12582912) == "bytes */12582912"

    def test_parse_range_returns_next_offset(self):
        assert parse_range_header("bytes=0-1048575") == 1048576

    def test_parse_range_missing(self):
        assert parse_range_header(None) is None

    @pytest.mark.parametrize("value", ["", "bytes=", "bytes=0-", "items=0-10", "bytes=a-b"])
    def test_parse_range_malformed(self, value):
        with pytest.raises(ValueError):
            parse_range_header(value)


class TestBackoffDelay:
    def test_doubles_per_retry(self):
        assert [backoff_delay(n, 1.0) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_scales_with_base(self):
        assert backoff_delay(3, 0.25) == 1.0


class TestProgressPercent:
    @pytest.mark.parametrize(
        "confirmed, total, expected",
        [
            (0, 100, 0),
            (5 * 1024 * 1024, 12 * 1024 * 1024, 42),
            (10 * 1024 * 1024, 12 * 1024 * 1024, 83),
            (1, 200, 1),  # 0.5 rounds up
            (5, 1000, 1),
            (4, 1000, 0),
            (100, 100, 100),
        ],
    )
    def test_rounding(self, confirmed, total, expected):
        assert progress_percent(confirmed, total) == expected

    def test_zero_total(self):
        assert progress_percent(0, 0) == 0


class TestTimestamps:
    def test_millisecond_precision(self):
        when = datetime(2025, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert format_timestamp(when) == "2025-01-02T03:04:05.678Z"

    def test_converts_to_utc(self):
        when = datetime(2025, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(when) == "2025-01-02T03:04:05.000Z"

    def test_remote_name_is_filesystem_safe(self):
        when = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        name = build_remote_name("video_stitched_1700000000000", "mp4", when)

        assert name == "video_stitched_1700000000000_2025-01-02T03-04-05-000Z.mp4"
        assert ":" not in name
