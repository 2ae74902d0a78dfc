"""Range query builder for TS.RANGE, TS.REVRANGE, TS.MRANGE and TS.MREVRANGE.

Encoding order::

    from to [LATEST] [FILTER_BY_TS ts...] [FILTER_BY_VALUE min max]
    [COUNT n] [ALIGN a] [AGGREGATION type bucket [BUCKETTIMESTAMP b] [EMPTY]]

ALIGN, BUCKETTIMESTAMP and EMPTY are only written when an aggregation is
set; the server rejects them otherwise. They may be configured in any
order relative to :meth:`RangeQuery.with_aggregation`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from redis_ts.aggregation import Aggregation, Align, BucketTimestamp
from redis_ts.tokens import EARLIEST, LATEST, Scalar, Token, encode_scalar, encode_timestamp


@dataclass(slots=True)
class RangeQuery:
    """Optional clauses of a range read.

    Example::

        query = (
            RangeQuery()
            .with_from(1234)
            .with_to(5678)
            .with_filter_by_value(1.0, 5.0)
            .with_aggregation(Aggregation(AggregationType.AVG, 5000))
            .with_bucket_timestamp(BucketTimestamp.HIGH)
            .with_empty(True)
        )
    """

    from_ts: Scalar | datetime | None = None
    to_ts: Scalar | datetime | None = None
    latest: bool = False
    filter_by_ts: list[Scalar | datetime] = field(default_factory=list)
    filter_by_value: tuple[float, float] | None = None
    count: int | None = None
    align: Align | None = None
    aggregation: Aggregation | None = None
    bucket_timestamp: BucketTimestamp | None = None
    empty: bool = False

    def with_from(self, ts: Scalar | datetime) -> RangeQuery:
        """Start bound. Defaults to ``-`` (earliest sample)."""
        self.from_ts = ts
        return self

    def with_to(self, ts: Scalar | datetime) -> RangeQuery:
        """End bound. Defaults to ``+`` (latest sample)."""
        self.to_ts = ts
        return self

    def with_latest(self, enabled: bool) -> RangeQuery:
        self.latest = enabled
        return self

    def with_filter_by_ts(self, timestamps: list[Scalar | datetime]) -> RangeQuery:
        """Keep only samples at these timestamps. Ignored when empty."""
        self.filter_by_ts = list(timestamps)
        return self

    def with_filter_by_value(self, min_value: float, max_value: float) -> RangeQuery:
        self.filter_by_value = (min_value, max_value)
        return self

    def with_count(self, count: int) -> RangeQuery:
        self.count = count
        return self

    def with_align(self, align: Align) -> RangeQuery:
        self.align = align
        return self

    def with_aggregation(self, aggregation: Aggregation) -> RangeQuery:
        self.aggregation = aggregation
        return self

    def with_bucket_timestamp(self, bucket_timestamp: BucketTimestamp) -> RangeQuery:
        self.bucket_timestamp = bucket_timestamp
        return self

    def with_empty(self, enabled: bool) -> RangeQuery:
        """Report empty buckets. Only sent with an aggregation."""
        self.empty = enabled
        return self

    def copy(self) -> RangeQuery:
        return RangeQuery(
            from_ts=self.from_ts,
            to_ts=self.to_ts,
            latest=self.latest,
            filter_by_ts=list(self.filter_by_ts),
            filter_by_value=self.filter_by_value,
            count=self.count,
            align=self.align,
            aggregation=self.aggregation,
            bucket_timestamp=self.bucket_timestamp,
            empty=self.empty,
        )

    # ----- serialization -----

    def append_tokens(self, out: list[Token]) -> None:
        out.append(EARLIEST if self.from_ts is None else encode_timestamp(self.from_ts))
        out.append(LATEST if self.to_ts is None else encode_timestamp(self.to_ts))

        if self.latest:
            out.append(b"LATEST")

        if self.filter_by_ts:
            out.append(b"FILTER_BY_TS")
            out.extend(encode_timestamp(ts) for ts in self.filter_by_ts)

        if self.filter_by_value is not None:
            min_value, max_value = self.filter_by_value
            out.append(b"FILTER_BY_VALUE")
            out.append(encode_scalar(min_value))
            out.append(encode_scalar(max_value))

        if self.count is not None:
            out.append(b"COUNT")
            out.append(encode_scalar(self.count))

        if self.aggregation is None:
            return

        if self.align is not None:
            self.align.append_tokens(out)

        self.aggregation.append_tokens(out)

        if self.bucket_timestamp is not None:
            self.bucket_timestamp.append_tokens(out)

        if self.empty:
            out.append(b"EMPTY")

    def to_tokens(self) -> list[Token]:
        out: list[Token] = []
        self.append_tokens(out)
        return out
