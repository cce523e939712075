"""Tests for compare/formatting.py module."""

import math

from build_tracker.compare.formatting import (
    HASH_CHANGE_PREFIX,
    describe_delta,
    format_bytes,
    format_percent,
    format_sha,
)
from build_tracker.compare.models import DeltaCell


class TestFormatBytes:
    """Tests for format_bytes function."""

    def test_small_values(self):
        assert format_bytes(0) == "0 B"
        assert format_bytes(1023) == "1023 B"
        assert format_bytes(-12) == "-12 B"

    def test_kibibytes(self):
        assert format_bytes(1024) == "1.00 KiB"
        assert format_bytes(1536) == "1.50 KiB"
        assert format_bytes(-2048) == "-2.00 KiB"

    def test_mebibytes(self):
        assert format_bytes(5 * 1024 * 1024) == "5.00 MiB"


class TestFormatPercent:
    """Tests for format_percent function."""

    def test_fraction(self):
        assert format_percent(0.5) == "50.000%"
        assert format_percent(-0.01234) == "-1.234%"

    def test_infinite(self):
        assert format_percent(math.inf) == "∞%"


class TestFormatSha:
    """Tests for format_sha function."""

    def test_truncates(self):
        assert format_sha("1234567890abcdef") == "1234567"

    def test_short_revision(self):
        assert format_sha("abc") == "abc"


class TestDescribeDelta:
    """Tests for describe_delta function."""

    def test_plain_change(self):
        cell = DeltaCell(sizes={"gzip": 50}, percents={"gzip": 0.5}, hash_changed=True)
        assert describe_delta(cell, "gzip") == "50 bytes (50.000%)"

    def test_hash_change_without_size_change(self):
        cell = DeltaCell(sizes={"gzip": 0}, percents={"gzip": 0.0}, hash_changed=True)
        text = describe_delta(cell, "gzip")
        assert text == HASH_CHANGE_PREFIX + "0 bytes (0.000%)"

    def test_missing_kind_is_zero(self):
        cell = DeltaCell(sizes={}, percents={})
        assert describe_delta(cell, "stat") == "0 bytes (0.000%)"
