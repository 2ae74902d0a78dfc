"""Reply decoding.

Replies arrive as generic trees of native values: ``int``, ``float``,
``bytes``/``str``, ``list``/``tuple``, ``dict`` (RESP3 maps), ``None``, and
exception instances for error replies handed over as values. The decoders
here destructure those trees into typed results.

Two policies apply:

- Metadata is decoded permissively. Missing TS.INFO fields keep their
  zero value, and malformed label pairs or compaction rules are skipped.
- Sample data is strict. A sample with the wrong arity or an
  unconvertible scalar fails the whole decode with
  :class:`~redis_ts.errors.MalformedReplyError`.

TS.GET is the exception to both: any error or unexpected shape decodes to
``None``.

Timestamp and value types are chosen by the caller through converter
callables (``as_int``, ``as_float``, ``as_str``, ``as_bytes``, or any
callable taking a reply scalar, e.g. ``decimal.Decimal`` via
``lambda v: Decimal(as_str(v))``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, NamedTuple, TypeVar

import redis.exceptions

from redis_ts.errors import (
    MalformedReplyError,
    ResponseError,
    TimeSeriesError,
    error_from_reply,
    error_from_transport,
)
from redis_ts.options import AnyDuplicatePolicy, DuplicatePolicy

log = logging.getLogger("redis_ts.reply")

T = TypeVar("T")
TS = TypeVar("TS")
V = TypeVar("V")

ReplyValue = Any
ScalarDecoder = Callable[[ReplyValue], T]


# ---------------------------------------------------------------------------
# Scalar converters
# ---------------------------------------------------------------------------


def _is_sequence(value: ReplyValue) -> bool:
    return isinstance(value, (list, tuple))


def as_str(value: ReplyValue) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedReplyError(f"Reply is not valid UTF-8: {value!r}", value) from e
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise MalformedReplyError(f"Expected a string, got {type(value).__name__}", value)


def as_bytes(value: ReplyValue) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise MalformedReplyError(f"Expected bytes, got {type(value).__name__}", value)


def as_int(value: ReplyValue) -> int:
    if isinstance(value, bool):
        raise MalformedReplyError("Expected an integer, got bool", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (bytes, str)):
        try:
            return int(value)
        except ValueError as e:
            raise MalformedReplyError(f"Expected an integer, got {value!r}", value) from e
    raise MalformedReplyError(f"Expected an integer, got {type(value).__name__}", value)


def as_float(value: ReplyValue) -> float:
    if isinstance(value, bool):
        raise MalformedReplyError("Expected a number, got bool", value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (bytes, str)):
        try:
            return float(value)
        except ValueError as e:
            raise MalformedReplyError(f"Expected a number, got {value!r}", value) from e
    raise MalformedReplyError(f"Expected a number, got {type(value).__name__}", value)


def _convert(decoder: ScalarDecoder[T], value: ReplyValue) -> T:
    """Run a caller-supplied converter, folding its failures into MalformedReplyError."""
    try:
        return decoder(value)
    except MalformedReplyError:
        raise
    except (ValueError, TypeError, ArithmeticError) as e:
        raise MalformedReplyError(f"Cannot convert {value!r}: {e}", value) from e


def _raise_if_error(reply: ReplyValue) -> None:
    if isinstance(reply, TimeSeriesError):
        raise reply
    if isinstance(reply, redis.exceptions.RedisError):
        raise error_from_transport(reply)
    if isinstance(reply, Exception):
        raise error_from_reply(str(reply))


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class Sample(NamedTuple, Generic[TS, V]):
    timestamp: TS
    value: V


class Rule(NamedTuple):
    """A compaction rule attached to a source series."""

    dest_key: str
    bucket_duration: int
    aggregation: str


Labels = list[tuple[str, str]]


@dataclass(slots=True)
class SeriesInfo:
    """Decoded TS.INFO reply. Absent fields keep their zero value."""

    total_samples: int = 0
    memory_usage: int = 0
    first_timestamp: int = 0
    last_timestamp: int = 0
    retention_time: int = 0
    chunk_count: int = 0
    max_samples_per_chunk: int = 0
    chunk_size: int = 0
    duplicate_policy: AnyDuplicatePolicy | None = None
    labels: Labels = field(default_factory=list)
    source_key: str | None = None
    rules: list[Rule] = field(default_factory=list)

    @property
    def is_compaction(self) -> bool:
        """True when this series is the destination of a compaction rule."""
        return self.source_key is not None


@dataclass
class RangeResult(Generic[TS, V]):
    """Samples in server order (descending for reverse ranges)."""

    values: list[Sample[TS, V]] = field(default_factory=list)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class MultiRangeEntry(Generic[TS, V]):
    key: str
    labels: Labels = field(default_factory=list)
    values: list[Sample[TS, V]] = field(default_factory=list)


@dataclass
class MultiRangeResult(Generic[TS, V]):
    values: list[MultiRangeEntry[TS, V]] = field(default_factory=list)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class MultiGetEntry(Generic[TS, V]):
    key: str
    labels: Labels = field(default_factory=list)
    value: Sample[TS, V] | None = None


@dataclass
class MultiGetResult(Generic[TS, V]):
    values: list[MultiGetEntry[TS, V]] = field(default_factory=list)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


# ---------------------------------------------------------------------------
# Permissive metadata decoding
# ---------------------------------------------------------------------------


def _decode_labels(value: ReplyValue) -> Labels:
    if isinstance(value, Mapping):
        pairs = list(value.items())
    elif _is_sequence(value):
        pairs = value
    else:
        return []

    labels: Labels = []
    for pair in pairs:
        if not _is_sequence(pair) or len(pair) != 2:
            log.debug("Skipping malformed label entry: %r", pair)
            continue
        try:
            labels.append((as_str(pair[0]), as_str(pair[1])))
        except MalformedReplyError as e:
            log.debug("Skipping undecodable label %r: %s", pair, e)
    return labels


def _decode_rules(value: ReplyValue) -> list[Rule]:
    if isinstance(value, Mapping):
        # RESP3: {dest_key: [bucket, aggregation, ...]}
        entries = [[k, *v] if _is_sequence(v) else [k] for k, v in value.items()]
    elif _is_sequence(value):
        entries = value
    else:
        return []

    rules: list[Rule] = []
    for entry in entries:
        # Newer servers append alignment after the first three elements.
        if not _is_sequence(entry) or len(entry) < 3:
            log.debug("Skipping malformed compaction rule: %r", entry)
            continue
        try:
            rules.append(Rule(as_str(entry[0]), as_int(entry[1]), as_str(entry[2])))
        except MalformedReplyError as e:
            log.debug("Skipping undecodable compaction rule %r: %s", entry, e)
    return rules


def _reply_mapping(reply: ReplyValue) -> dict[str, ReplyValue]:
    if isinstance(reply, Mapping):
        items = list(reply.items())
    elif _is_sequence(reply):
        items = list(zip(reply[0::2], reply[1::2]))
    else:
        raise MalformedReplyError(
            f"Expected a key/value sequence, got {type(reply).__name__}", reply
        )

    result: dict[str, ReplyValue] = {}
    for key, value in items:
        try:
            result[as_str(key)] = value
        except MalformedReplyError:
            log.debug("Skipping non-string field name %r", key)
    return result


_INFO_INT_FIELDS = {
    "totalSamples": "total_samples",
    "memoryUsage": "memory_usage",
    "firstTimestamp": "first_timestamp",
    "lastTimestamp": "last_timestamp",
    "retentionTime": "retention_time",
    "chunkCount": "chunk_count",
    "maxSamplesPerChunk": "max_samples_per_chunk",
    "chunkSize": "chunk_size",
}


def decode_info(reply: ReplyValue) -> SeriesInfo:
    """Decode a TS.INFO reply.

    Raises:
        MalformedReplyError: if the reply is not key/value shaped, or a
            present numeric field is not numeric.
    """
    _raise_if_error(reply)
    fields = _reply_mapping(reply)
    info = SeriesInfo()

    for wire_name, attr in _INFO_INT_FIELDS.items():
        value = fields.get(wire_name)
        if value is not None:
            setattr(info, attr, as_int(value))

    policy = fields.get("duplicatePolicy")
    if policy is not None:
        info.duplicate_policy = DuplicatePolicy.parse(as_str(policy))

    source = fields.get("sourceKey")
    if source is not None:
        info.source_key = as_str(source)

    info.labels = _decode_labels(fields.get("labels"))
    info.rules = _decode_rules(fields.get("rules"))
    return info


# ---------------------------------------------------------------------------
# Strict sample decoding
# ---------------------------------------------------------------------------


def _decode_sample(
    item: ReplyValue,
    timestamp_type: ScalarDecoder[TS],
    value_type: ScalarDecoder[V],
) -> Sample[TS, V]:
    if not _is_sequence(item) or len(item) != 2:
        raise MalformedReplyError(f"Expected a [timestamp, value] pair, got {item!r}", item)
    return Sample(_convert(timestamp_type, item[0]), _convert(value_type, item[1]))


def _decode_samples(
    reply: ReplyValue,
    timestamp_type: ScalarDecoder[TS],
    value_type: ScalarDecoder[V],
) -> list[Sample[TS, V]]:
    if not _is_sequence(reply):
        raise MalformedReplyError(
            f"Expected a sequence of samples, got {type(reply).__name__}", reply
        )
    return [_decode_sample(item, timestamp_type, value_type) for item in reply]


def decode_range(
    reply: ReplyValue,
    timestamp_type: ScalarDecoder[TS] = as_int,
    value_type: ScalarDecoder[V] = as_float,
) -> RangeResult[TS, V]:
    """Decode a TS.RANGE / TS.REVRANGE reply, preserving order."""
    _raise_if_error(reply)
    return RangeResult(_decode_samples(reply, timestamp_type, value_type))


def _keyed_entries(reply: ReplyValue, command: str) -> list[tuple[str, ReplyValue, ReplyValue]]:
    """Split a multi-series reply into (key, labels, payload) triples."""
    if isinstance(reply, Mapping):
        # RESP3: {key: [labels, (metadata,) payload]}
        entries = []
        for key, body in reply.items():
            if not _is_sequence(body) or len(body) < 2:
                raise MalformedReplyError(f"Malformed {command} entry for {key!r}", body)
            entries.append((as_str(key), body[0], body[-1]))
        return entries

    if not _is_sequence(reply):
        raise MalformedReplyError(f"Expected a {command} sequence, got {type(reply).__name__}", reply)

    entries = []
    for entry in reply:
        if not _is_sequence(entry) or len(entry) != 3:
            raise MalformedReplyError(
                f"Expected a [key, labels, data] {command} entry, got {entry!r}", entry
            )
        entries.append((as_str(entry[0]), entry[1], entry[2]))
    return entries


def decode_mrange(
    reply: ReplyValue,
    timestamp_type: ScalarDecoder[TS] = as_int,
    value_type: ScalarDecoder[V] = as_float,
) -> MultiRangeResult[TS, V]:
    """Decode a TS.MRANGE / TS.MREVRANGE reply."""
    _raise_if_error(reply)
    return MultiRangeResult(
        [
            MultiRangeEntry(
                key,
                _decode_labels(labels),
                _decode_samples(samples, timestamp_type, value_type),
            )
            for key, labels, samples in _keyed_entries(reply, "TS.MRANGE")
        ]
    )


def decode_get(
    reply: ReplyValue,
    timestamp_type: ScalarDecoder[TS] = as_int,
    value_type: ScalarDecoder[V] = as_float,
) -> Sample[TS, V] | None:
    """Decode a TS.GET reply. Errors and unexpected shapes become ``None``."""
    if isinstance(reply, Exception):
        log.debug("TS.GET error reply treated as no value: %s", reply)
        return None
    if not _is_sequence(reply) or len(reply) != 2:
        return None
    try:
        return _decode_sample(reply, timestamp_type, value_type)
    except MalformedReplyError as e:
        log.debug("TS.GET reply treated as no value: %s", e)
        return None


def decode_mget(
    reply: ReplyValue,
    timestamp_type: ScalarDecoder[TS] = as_int,
    value_type: ScalarDecoder[V] = as_float,
) -> MultiGetResult[TS, V]:
    """Decode a TS.MGET reply. Series without samples get ``value=None``."""
    _raise_if_error(reply)
    result: MultiGetResult[TS, V] = MultiGetResult()
    for key, labels, sample in _keyed_entries(reply, "TS.MGET"):
        value = None
        if sample is not None and not (_is_sequence(sample) and len(sample) == 0):
            value = _decode_sample(sample, timestamp_type, value_type)
        result.values.append(MultiGetEntry(key, _decode_labels(labels), value))
    return result


# ---------------------------------------------------------------------------
# Simple replies
# ---------------------------------------------------------------------------


def decode_ok(reply: ReplyValue) -> bool:
    """Decode a simple ``OK`` status reply."""
    _raise_if_error(reply)
    if reply is True or reply in (b"OK", "OK"):
        return True
    raise MalformedReplyError(f"Expected OK, got {reply!r}", reply)


def decode_int(reply: ReplyValue) -> int:
    _raise_if_error(reply)
    return as_int(reply)


def decode_madd(reply: ReplyValue) -> list[int | ResponseError]:
    """Decode TS.MADD: one timestamp or error per submitted sample."""
    _raise_if_error(reply)
    if not _is_sequence(reply):
        raise MalformedReplyError(f"Expected a TS.MADD sequence, got {type(reply).__name__}", reply)

    results: list[int | ResponseError] = []
    for item in reply:
        if isinstance(item, ResponseError):
            results.append(item)
        elif isinstance(item, Exception):
            results.append(error_from_reply(str(item)))
        else:
            results.append(as_int(item))
    return results


def decode_query_index(reply: ReplyValue) -> list[str]:
    _raise_if_error(reply)
    if not isinstance(reply, (list, tuple, set)):
        raise MalformedReplyError(
            f"Expected a sequence of keys, got {type(reply).__name__}", reply
        )
    return [as_str(key) for key in reply]
