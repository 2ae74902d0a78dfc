"""Tests for scalar token encoding and timestamp normalization."""

from datetime import datetime, timedelta, timezone

import pytest

from redis_ts.tokens import encode_all, encode_scalar, encode_timestamp, to_milliseconds


class TestEncodeScalar:
    """Test canonical wire forms of scalars."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (60000, b"60000"),
            (-3, b"-3"),
            (0, b"0"),
            (2.5, b"2.5"),
            (1.0, b"1.0"),
            (1e20, b"100000000000000000000"),
            (1e-07, b"0.0000001"),
            (-2.5e-05, b"-0.000025"),
            (float("inf"), b"inf"),
            ("engine", b"engine"),
            ("température", "température".encode("utf-8")),
            (b"\x00\xff", b"\x00\xff"),
            (bytearray(b"raw"), b"raw"),
            (memoryview(b"view"), b"view"),
        ],
    )
    def test_encodes(self, value, expected):
        assert encode_scalar(value) == expected

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            encode_scalar(True)

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError, match="NoneType"):
            encode_scalar(None)

    def test_encode_all(self):
        assert encode_all(["a", 1, b"c"]) == [b"a", b"1", b"c"]


class TestTimestamps:
    """Test datetime and timedelta conversion to milliseconds."""

    def test_aware_datetime(self):
        dt = datetime(1970, 1, 1, 0, 0, 1, 500000, tzinfo=timezone.utc)
        assert to_milliseconds(dt) == 1500

    def test_naive_datetime_is_utc(self):
        assert to_milliseconds(datetime(1970, 1, 1, 0, 1)) == 60000

    def test_timedelta(self):
        assert to_milliseconds(timedelta(minutes=1)) == 60000

    def test_passthrough(self):
        assert to_milliseconds("-") == "-"
        assert to_milliseconds(42) == 42

    def test_encode_timestamp(self):
        assert encode_timestamp(datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)) == b"2000"
        assert encode_timestamp(1234) == b"1234"
