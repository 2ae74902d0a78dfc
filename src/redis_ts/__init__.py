"""redis-ts-py: typed command builders and reply decoders for RedisTimeSeries.

Turns series options, range queries and label filters into TS.* argument
lists, and decodes the server's reply trees into samples, series metadata
and multi-series results. Transport is left to redis-py.

Example usage::

    import asyncio
    from redis_ts import (
        AsyncTimeSeriesClient, ClientConfig, SeriesConfig, DuplicatePolicy,
        RangeQuery, Aggregation, AggregationType, FilterOptions,
    )

    async def main():
        cfg = ClientConfig(host="127.0.0.1", port=6379)
        async with AsyncTimeSeriesClient.from_config(cfg) as ts:
            await ts.ts_create(
                "temp:eu",
                SeriesConfig()
                .with_retention(86_400_000)
                .with_duplicate_policy(DuplicatePolicy.LAST)
                .with_label("sensor", "temperature"),
            )
            await ts.ts_add("temp:eu", 1234, 21.5)

            hourly = RangeQuery().with_aggregation(Aggregation(AggregationType.AVG, 3_600_000))
            series = await ts.ts_mrange(hourly, FilterOptions().equals("sensor", "temperature"))
            for entry in series:
                print(entry.key, entry.values)

    asyncio.run(main())
"""

from redis_ts.aggregation import Aggregation, AggregationType, Align, BucketTimestamp
from redis_ts.client import AsyncTimeSeriesClient, TimeSeriesClient
from redis_ts.commands import AsyncTsCommands, Command, TsCommands
from redis_ts.config import DEFAULT_PORT, ClientConfig
from redis_ts.errors import (
    ConnectionError,
    DuplicateSampleError,
    KeyExistsError,
    KeyNotFoundError,
    MalformedReplyError,
    ProtocolError,
    ResponseError,
    TimeoutError,
    TimeSeriesError,
    UnrecognizedVariantError,
)
from redis_ts.filters import Compare, FilterExpression, FilterOptions
from redis_ts.options import (
    AnyDuplicatePolicy,
    DuplicatePolicy,
    OtherDuplicatePolicy,
    SeriesConfig,
)
from redis_ts.query import RangeQuery
from redis_ts.reply import (
    MultiGetEntry,
    MultiGetResult,
    MultiRangeEntry,
    MultiRangeResult,
    RangeResult,
    Rule,
    Sample,
    SeriesInfo,
    as_bytes,
    as_float,
    as_int,
    as_str,
)
from redis_ts.tokens import Token, encode_scalar

__version__ = "0.1.0"

__all__ = [
    # Tokens
    "Token",
    "encode_scalar",
    # Options
    "SeriesConfig",
    "DuplicatePolicy",
    "OtherDuplicatePolicy",
    "AnyDuplicatePolicy",
    # Aggregation
    "Aggregation",
    "AggregationType",
    "Align",
    "BucketTimestamp",
    # Queries and filters
    "RangeQuery",
    "FilterOptions",
    "FilterExpression",
    "Compare",
    # Replies
    "Sample",
    "Rule",
    "SeriesInfo",
    "RangeResult",
    "MultiRangeEntry",
    "MultiRangeResult",
    "MultiGetEntry",
    "MultiGetResult",
    "as_int",
    "as_float",
    "as_str",
    "as_bytes",
    # Errors
    "TimeSeriesError",
    "ConnectionError",
    "TimeoutError",
    "ProtocolError",
    "MalformedReplyError",
    "UnrecognizedVariantError",
    "ResponseError",
    "KeyNotFoundError",
    "KeyExistsError",
    "DuplicateSampleError",
    # Config
    "ClientConfig",
    "DEFAULT_PORT",
    # Commands
    "Command",
    "TsCommands",
    "AsyncTsCommands",
    # Clients
    "TimeSeriesClient",
    "AsyncTimeSeriesClient",
]
