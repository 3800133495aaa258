"""Unit tests for utility functions."""

from datetime import datetime

import pytest

from icloud_snapshot.utils import (
    format_date_stamp,
    format_duration,
    format_size,
    format_timecode,
)

WHEN = datetime(2025, 1, 5, 10, 30, 0)


class TestTimestamps:
    """Tests for timestamp formatting."""

    def test_date_stamp(self):
        assert format_date_stamp(WHEN) == "05 Jan 25 10:30:00"

    def test_timecode(self):
        assert format_timecode(WHEN) == "05-Jan-25_10_30_00"

    def test_timecode_is_path_safe(self):
        assert "/" not in format_timecode()
        assert ":" not in format_timecode()


class TestFormatSize:
    """Tests for format_size function."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 B"),
            (1023, "1023 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (1024 * 1024, "1.0 MB"),
            (5 * 1024**3, "5.0 GB"),
        ],
    )
    def test_sizes(self, size, expected):
        assert format_size(size) == expected


class TestFormatDuration:
    """Tests for format_duration function."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0 seconds"),
            (0.4, "0 seconds"),
            (1, "1 second"),
            (59, "59 seconds"),
            (65, "1 minute, 5 seconds"),
            (3600, "1 hour"),
            (7322, "2 hours, 2 minutes, 2 seconds"),
            (-3, "0 seconds"),
        ],
    )
    def test_durations(self, seconds, expected):
        assert format_duration(seconds) == expected
