"""
Tests for ConvertUtils formatting helpers.
"""
import pytest

from checkdupes.utils.convert_utils import ConvertUtils


class TestBytesToHuman:

    @pytest.mark.parametrize("size, expected", [
        (0, "0.00B"),
        (512, "512.00B"),
        (1024, "1.00KB"),
        (1536, "1.50KB"),
        (1024 * 1024, "1.00MB"),
        (5 * 1024 ** 3, "5.00GB"),
    ])
    def test_units(self, size, expected):
        assert ConvertUtils.bytes_to_human(size) == expected

    def test_negative_size(self):
        assert ConvertUtils.bytes_to_human(-1) == "0B"


class TestTimestamps:

    def test_invalid_timestamp(self):
        assert ConvertUtils.timestamp_to_human(float("inf")) == "Invalid timestamp"

    def test_ns_timestamp_keeps_nanoseconds(self):
        text = ConvertUtils.ns_timestamp_to_human(1_700_000_000_123_456_789)
        assert text.endswith(".123456789")
        assert "+" in text

    def test_ns_timestamp_pads_fraction(self):
        assert ConvertUtils.ns_timestamp_to_human(1_700_000_000_000_000_005).endswith(".000000005")
