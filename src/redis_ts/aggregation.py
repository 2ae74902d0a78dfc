"""Aggregation, bucket alignment and bucket timestamp clauses.

Wire forms::

    AGGREGATION <type> <bucket_ms>
    ALIGN -|+|<timestamp>
    BUCKETTIMESTAMP -|+|~
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from redis_ts.tokens import Token, encode_scalar, to_milliseconds


class AggregationType(Enum):
    """Aggregators accepted by range queries and compaction rules."""

    AVG = "avg"
    SUM = "sum"
    MIN = "min"
    MAX = "max"
    RANGE = "range"
    COUNT = "count"
    FIRST = "first"
    LAST = "last"
    STD_P = "std.p"
    STD_S = "std.s"
    VAR_P = "var.p"
    VAR_S = "var.s"
    TWA = "twa"


@dataclass(frozen=True, slots=True)
class Aggregation:
    """An aggregator applied over fixed time buckets.

    ``bucket`` is the bucket duration in milliseconds; a ``timedelta`` is
    converted on construction.
    """

    type: AggregationType
    bucket: int | timedelta

    def __post_init__(self) -> None:
        if isinstance(self.bucket, timedelta):
            object.__setattr__(self, "bucket", to_milliseconds(self.bucket))

    def append_tokens(self, out: list[Token]) -> None:
        out.append(b"AGGREGATION")
        out.append(self.type.value.encode("ascii"))
        out.append(encode_scalar(self.bucket))

    def to_tokens(self) -> list[Token]:
        out: list[Token] = []
        self.append_tokens(out)
        return out


@dataclass(frozen=True, slots=True)
class Align:
    """Reference timestamp that aggregation buckets are aligned to.

    Use :meth:`start`, :meth:`end` or :meth:`at` rather than the
    constructor.
    """

    reference: int | str

    @classmethod
    def start(cls) -> Align:
        """Align to the query's start bound."""
        return cls("-")

    @classmethod
    def end(cls) -> Align:
        """Align to the query's end bound."""
        return cls("+")

    @classmethod
    def at(cls, timestamp: int | datetime) -> Align:
        """Align to a specific timestamp."""
        return cls(to_milliseconds(timestamp))

    def append_tokens(self, out: list[Token]) -> None:
        out.append(b"ALIGN")
        out.append(encode_scalar(self.reference))


class BucketTimestamp(Enum):
    """Which point of a bucket is reported as its timestamp."""

    LOW = "-"
    HIGH = "+"
    MID = "~"

    def append_tokens(self, out: list[Token]) -> None:
        out.append(b"BUCKETTIMESTAMP")
        out.append(self.value.encode("ascii"))
