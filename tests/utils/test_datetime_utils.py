#!/usr/bin/env python3
"""
Tests for Datetime Utility Functions
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from metric_standards.utils.datetime_utils import (
    is_iso_timestamp,
    months_since,
    parse_iso_timestamp,
    utc_now_iso,
)


class TestUtcNowIso:
    """Tests for utc_now_iso()"""

    def test_shape(self):
        """Test millisecond precision with Z suffix"""
        value = utc_now_iso()

        assert value.endswith("Z")
        assert len(value) == len("2026-02-10T10:00:00.000Z")
        assert is_iso_timestamp(value)


class TestIsIsoTimestamp:
    """Tests for is_iso_timestamp()"""

    @pytest.mark.parametrize(
        "value",
        [
            "2024-08-25T00:00:00.000Z",
            "2024-08-25T00:00:00Z",
            "2024-08-25T00:00:00",
            "2024-08-25T00:00:00.123456+02:00",
        ],
    )
    def test_valid(self, value):
        """Test accepted timestamp shapes"""
        assert is_iso_timestamp(value)

    @pytest.mark.parametrize(
        "value",
        ["2024/08/25", "2024-08-25", "25-08-2024T00:00:00Z", "2024-02-30T00:00:00Z", "", None, 20240825],
    )
    def test_invalid(self, value):
        """Test rejected shapes, impossible dates and non-strings"""
        assert not is_iso_timestamp(value)


class TestParseIsoTimestamp:
    """Tests for parse_iso_timestamp()"""

    def test_z_suffix(self):
        """Test Z is read as UTC"""
        assert parse_iso_timestamp("2026-02-10T10:00:00Z") == datetime(2026, 2, 10, 10, tzinfo=UTC)

    def test_naive_assumed_utc(self):
        """Test naive timestamps become UTC"""
        assert parse_iso_timestamp("2026-02-10T10:00:00").tzinfo == UTC

    def test_offset_preserved(self):
        """Test explicit offsets are kept"""
        parsed = parse_iso_timestamp("2026-02-10T10:00:00+02:00")

        assert parsed.utcoffset() == timedelta(hours=2)
        assert parsed == datetime(2026, 2, 10, 8, tzinfo=timezone.utc)

    def test_invalid_format(self):
        """Test garbage raises ValueError"""
        with pytest.raises(ValueError, match="Invalid timestamp format"):
            parse_iso_timestamp("not a date")

    def test_invalid_type(self):
        """Test non-strings raise ValueError"""
        with pytest.raises(ValueError, match="must be a string"):
            parse_iso_timestamp(None)  # type: ignore[arg-type]


class TestMonthsSince:
    """Tests for months_since()"""

    def test_thirty_day_months(self):
        """Test a month is 30 days"""
        start = datetime(2026, 1, 1, tzinfo=UTC)

        assert months_since(start, datetime(2026, 1, 31, tzinfo=UTC)) == 1.0
        assert months_since(start, start + timedelta(days=45)) == 1.5

    def test_future_is_negative(self):
        """Test timestamps after now give negative ages"""
        start = datetime(2026, 3, 2, tzinfo=UTC)

        assert months_since(start, datetime(2026, 1, 31, tzinfo=UTC)) == -1.0

    def test_naive_now(self):
        """Test a naive reference time is treated as UTC"""
        start = datetime(2026, 1, 1, tzinfo=UTC)

        assert months_since(start, datetime(2026, 1, 31)) == 1.0

    def test_default_now(self):
        """Test the current time is used by default"""
        assert months_since(datetime.now(UTC) - timedelta(days=60)) == pytest.approx(2.0, abs=0.01)
