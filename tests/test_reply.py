"""Tests for reply decoding: strict samples, permissive metadata."""

from decimal import Decimal

import pytest
import redis.exceptions

from redis_ts.errors import (
    KeyNotFoundError,
    MalformedReplyError,
    ResponseError,
    TimeoutError,
)
from redis_ts.options import DuplicatePolicy, OtherDuplicatePolicy
from redis_ts.reply import (
    Rule,
    Sample,
    as_bytes,
    as_float,
    as_int,
    as_str,
    decode_get,
    decode_info,
    decode_int,
    decode_madd,
    decode_mget,
    decode_mrange,
    decode_ok,
    decode_query_index,
    decode_range,
)


class TestConverters:
    """Test scalar converters."""

    def test_as_int(self):
        assert as_int(b"42") == 42
        assert as_int("7") == 7
        assert as_int(3) == 3
        assert as_int(4.0) == 4

    def test_as_int_rejects(self):
        for bad in (b"4.5", True, None, [1]):
            with pytest.raises(MalformedReplyError):
                as_int(bad)

    def test_as_float(self):
        assert as_float(b"1.5") == 1.5
        assert as_float(2) == 2.0
        assert as_float("inf") == float("inf")

    def test_as_float_rejects(self):
        with pytest.raises(MalformedReplyError):
            as_float(b"abc")

    def test_as_str(self):
        assert as_str(b"engine") == "engine"
        assert as_str(12) == "12"
        with pytest.raises(MalformedReplyError):
            as_str(b"\xff\xfe")

    def test_as_bytes(self):
        assert as_bytes("a") == b"a"
        assert as_bytes(b"a") == b"a"
        with pytest.raises(MalformedReplyError):
            as_bytes(1)


class TestDecodeRange:
    """Test TS.RANGE decoding."""

    def test_samples_in_order(self):
        reply = [[1, b"1.5"], [2, b"2.5"], [3, b"0"]]
        result = decode_range(reply)
        assert result.values == [Sample(1, 1.5), Sample(2, 2.5), Sample(3, 0.0)]
        assert len(result) == 3

    def test_empty(self):
        assert decode_range([]).values == []

    def test_custom_types(self):
        result = decode_range([[1, b"1.10"]], value_type=lambda v: Decimal(as_str(v)))
        assert result.values == [Sample(1, Decimal("1.10"))]

    def test_wrong_arity_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_range([[1, b"1.0", b"extra"]])

    def test_unconvertible_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_range([[1, b"x"]])

    def test_converter_value_error_wrapped(self):
        with pytest.raises(MalformedReplyError):
            decode_range([[1, b"1"]], value_type=lambda v: int("x"))

    def test_not_a_sequence_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_range(b"OK")

    def test_error_value_raised(self):
        with pytest.raises(KeyNotFoundError):
            decode_range(redis.exceptions.ResponseError("ERR TSDB: the key does not exist"))


class TestDecodeInfo:
    """Test TS.INFO decoding."""

    def test_full_reply(self):
        reply = [
            b"totalSamples", 100,
            b"memoryUsage", 4184,
            b"firstTimestamp", 1,
            b"lastTimestamp", 100,
            b"retentionTime", 60000,
            b"chunkCount", 1,
            b"maxSamplesPerChunk", 256,
            b"chunkSize", 4096,
            b"duplicatePolicy", b"last",
            b"labels", [[b"sensor", b"temperature"], [b"region", b"eu"]],
            b"sourceKey", None,
            b"rules", [[b"temp:avg", 60000, b"AVG"]],
        ]
        info = decode_info(reply)
        assert info.total_samples == 100
        assert info.memory_usage == 4184
        assert info.first_timestamp == 1
        assert info.last_timestamp == 100
        assert info.retention_time == 60000
        assert info.chunk_count == 1
        assert info.max_samples_per_chunk == 256
        assert info.chunk_size == 4096
        assert info.duplicate_policy is DuplicatePolicy.LAST
        assert info.labels == [("sensor", "temperature"), ("region", "eu")]
        assert info.source_key is None
        assert not info.is_compaction
        assert info.rules == [Rule("temp:avg", 60000, "AVG")]

    def test_only_total_samples(self):
        info = decode_info([b"totalSamples", 5])
        assert info.total_samples == 5
        assert info.memory_usage == 0
        assert info.chunk_size == 0
        assert info.duplicate_policy is None
        assert info.labels == []
        assert info.rules == []

    def test_unknown_policy_and_source_key(self):
        info = decode_info([b"duplicatePolicy", b"sum", b"sourceKey", b"raw"])
        assert info.duplicate_policy == OtherDuplicatePolicy("sum")
        assert info.source_key == "raw"
        assert info.is_compaction

    def test_malformed_metadata_skipped(self):
        reply = [
            b"labels", [[b"ok", b"1"], [b"broken"], b"junk"],
            b"rules", [[b"short", 1], [b"full", 1000, b"max", 0], [b"bad", b"x", b"avg"]],
        ]
        info = decode_info(reply)
        assert info.labels == [("ok", "1")]
        assert info.rules == [Rule("full", 1000, "max")]

    def test_trailing_key_ignored(self):
        assert decode_info([b"totalSamples", 3, b"dangling"]).total_samples == 3

    def test_resp3_map(self):
        reply = {
            "totalSamples": 2,
            "labels": {"a": "1"},
            "rules": {"dest": [5000, "sum", 0]},
        }
        info = decode_info(reply)
        assert info.total_samples == 2
        assert info.labels == [("a", "1")]
        assert info.rules == [Rule("dest", 5000, "sum")]

    def test_present_non_numeric_field_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_info([b"totalSamples", b"lots"])

    def test_not_key_value_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_info(5)


class TestDecodeMrange:
    """Test TS.MRANGE decoding."""

    def test_scenario(self):
        reply = [
            [b"temp:us", [[b"sensor", b"temperature"]], [[1, b"9.5"]]],
            [b"temp:eu", [], [[21, b"1"], [321, b"2"], [4321, b"3"]]],
        ]
        result = decode_mrange(reply)
        assert len(result) == 2
        assert result.values[0].labels == [("sensor", "temperature")]
        entry = result.values[1]
        assert entry.key == "temp:eu"
        assert entry.labels == []
        assert entry.values == [(21, 1.0), (321, 2.0), (4321, 3.0)]

    def test_resp3_map(self):
        reply = {b"k": [{b"a": b"b"}, [], [[1, 2.0]]]}
        entry = decode_mrange(reply).values[0]
        assert entry.key == "k"
        assert entry.labels == [("a", "b")]
        assert entry.values == [Sample(1, 2.0)]

    def test_bad_entry_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_mrange([[b"k", []]])

    def test_bad_sample_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_mrange([[b"k", [], [[1]]]])


class TestDecodeGet:
    """Test TS.GET decoding."""

    def test_sample(self):
        assert decode_get([1234, b"36.1"]) == Sample(1234, 36.1)

    @pytest.mark.parametrize(
        "reply",
        [[], None, [1], [1, b"x"], b"OK", redis.exceptions.ResponseError("ERR no key")],
    )
    def test_no_value(self, reply):
        assert decode_get(reply) is None


class TestDecodeMget:
    """Test TS.MGET decoding."""

    def test_entries(self):
        reply = [
            [b"a", [[b"x", b"1"]], [5, b"1.5"]],
            [b"b", [], []],
        ]
        result = decode_mget(reply)
        assert [e.key for e in result] == ["a", "b"]
        assert result.values[0].labels == [("x", "1")]
        assert result.values[0].value == Sample(5, 1.5)
        assert result.values[1].value is None

    def test_bad_sample_fails(self):
        with pytest.raises(MalformedReplyError):
            decode_mget([[b"a", [], [5, b"nan-ish"]]])


class TestSimpleReplies:
    """Test OK, integer, MADD and QUERYINDEX replies."""

    @pytest.mark.parametrize("reply", [True, b"OK", "OK"])
    def test_ok(self, reply):
        assert decode_ok(reply) is True

    def test_ok_rejects(self):
        with pytest.raises(MalformedReplyError):
            decode_ok(b"QUEUED")

    def test_int(self):
        assert decode_int(1234) == 1234

    def test_int_error(self):
        with pytest.raises(TimeoutError):
            decode_int(redis.exceptions.TimeoutError("Timeout reading from socket"))

    def test_madd_mixed(self):
        err = redis.exceptions.ResponseError("ERR TSDB: the key does not exist")
        result = decode_madd([1, err, 3])
        assert result[0] == 1
        assert isinstance(result[1], KeyNotFoundError)
        assert result[2] == 3

    def test_madd_keeps_our_errors(self):
        err = ResponseError("boom")
        assert decode_madd([err])[0] is err

    def test_query_index(self):
        assert decode_query_index([b"a", b"b"]) == ["a", "b"]
        assert decode_query_index([]) == []

    def test_query_index_rejects(self):
        with pytest.raises(MalformedReplyError):
            decode_query_index(b"a")
