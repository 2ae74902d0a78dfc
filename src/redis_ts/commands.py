"""Time series commands.

Each command is built as a :class:`Command`: the full token list (command
name first) plus the decoder for its reply. :class:`TsCommands` and
:class:`AsyncTsCommands` expose them as methods on anything that provides
``execute_command(*args)``, blocking or awaitable respectively::

    class TsRedis(TsCommands, redis.Redis):
        pass

    r = TsRedis()
    r.ts_create("my_engine", SeriesConfig().with_retention(60000))
    r.ts_add("my_engine", 1234, 36.1)
    r.ts_range("my_engine", RangeQuery().with_count(10))
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Any, Callable, Iterable, NamedTuple

import redis.exceptions

from redis_ts.aggregation import Aggregation
from redis_ts.errors import ResponseError, error_from_transport
from redis_ts.filters import FilterOptions
from redis_ts.options import SeriesConfig
from redis_ts.query import RangeQuery
from redis_ts.reply import (
    MultiGetResult,
    MultiRangeResult,
    RangeResult,
    ReplyValue,
    Sample,
    ScalarDecoder,
    SeriesInfo,
    as_float,
    as_int,
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
from redis_ts.tokens import AUTO_TIMESTAMP, Scalar, Token, encode_scalar, encode_timestamp

log = logging.getLogger("redis_ts.commands")

Timestamp = Scalar | datetime


class Command(NamedTuple):
    """Tokens to send and the decoder for the reply."""

    args: list[Token]
    decoder: Callable[[ReplyValue], Any]

    @property
    def name(self) -> str:
        return self.args[0].decode("ascii")


# ---------------------------------------------------------------------------
# Command builders
# ---------------------------------------------------------------------------


def create_command(key: Scalar, config: SeriesConfig | None = None) -> Command:
    args = [b"TS.CREATE", encode_scalar(key)]
    if config is not None:
        config.append_tokens(args)
    return Command(args, decode_ok)


def alter_command(key: Scalar, config: SeriesConfig) -> Command:
    """TS.ALTER; UNCOMPRESSED is dropped since the server rejects it here."""
    args = [b"TS.ALTER", encode_scalar(key)]
    config.without_uncompressed().append_tokens(args)
    return Command(args, decode_ok)


def add_command(
    key: Scalar,
    timestamp: Timestamp | None,
    value: Scalar,
    config: SeriesConfig | None = None,
) -> Command:
    """TS.ADD. A ``None`` timestamp lets the server use its clock (``*``)."""
    ts = AUTO_TIMESTAMP if timestamp is None else encode_timestamp(timestamp)
    args = [b"TS.ADD", encode_scalar(key), ts, encode_scalar(value)]
    if config is not None:
        config.append_tokens(args)
    return Command(args, decode_int)


def madd_command(samples: Iterable[tuple[Scalar, Timestamp, Scalar]]) -> Command:
    args = [b"TS.MADD"]
    for key, timestamp, value in samples:
        args.append(encode_scalar(key))
        args.append(encode_timestamp(timestamp))
        args.append(encode_scalar(value))
    return Command(args, decode_madd)


def _counter_command(
    name: bytes,
    key: Scalar,
    value: Scalar,
    timestamp: Timestamp | None,
    config: SeriesConfig | None,
) -> Command:
    args = [name, encode_scalar(key), encode_scalar(value)]
    if timestamp is not None:
        args.append(b"TIMESTAMP")
        args.append(encode_timestamp(timestamp))
    if config is not None:
        config.append_tokens(args)
    return Command(args, decode_int)


def incrby_command(
    key: Scalar,
    value: Scalar,
    timestamp: Timestamp | None = None,
    config: SeriesConfig | None = None,
) -> Command:
    return _counter_command(b"TS.INCRBY", key, value, timestamp, config)


def decrby_command(
    key: Scalar,
    value: Scalar,
    timestamp: Timestamp | None = None,
    config: SeriesConfig | None = None,
) -> Command:
    return _counter_command(b"TS.DECRBY", key, value, timestamp, config)


def createrule_command(source_key: Scalar, dest_key: Scalar, aggregation: Aggregation) -> Command:
    args = [b"TS.CREATERULE", encode_scalar(source_key), encode_scalar(dest_key)]
    aggregation.append_tokens(args)
    return Command(args, decode_ok)


def deleterule_command(source_key: Scalar, dest_key: Scalar) -> Command:
    return Command([b"TS.DELETERULE", encode_scalar(source_key), encode_scalar(dest_key)], decode_ok)


def range_command(
    key: Scalar,
    query: RangeQuery | None = None,
    *,
    reverse: bool = False,
    timestamp_type: ScalarDecoder = as_int,
    value_type: ScalarDecoder = as_float,
) -> Command:
    args = [b"TS.REVRANGE" if reverse else b"TS.RANGE", encode_scalar(key)]
    (query or RangeQuery()).append_tokens(args)
    return Command(args, partial(decode_range, timestamp_type=timestamp_type, value_type=value_type))


def mrange_command(
    query: RangeQuery | None,
    filters: FilterOptions,
    *,
    reverse: bool = False,
    timestamp_type: ScalarDecoder = as_int,
    value_type: ScalarDecoder = as_float,
) -> Command:
    args = [b"TS.MREVRANGE" if reverse else b"TS.MRANGE"]
    (query or RangeQuery()).append_tokens(args)
    filters.append_tokens(args)
    return Command(args, partial(decode_mrange, timestamp_type=timestamp_type, value_type=value_type))


def get_command(
    key: Scalar,
    *,
    timestamp_type: ScalarDecoder = as_int,
    value_type: ScalarDecoder = as_float,
) -> Command:
    return Command(
        [b"TS.GET", encode_scalar(key)],
        partial(decode_get, timestamp_type=timestamp_type, value_type=value_type),
    )


def mget_command(
    filters: FilterOptions,
    *,
    timestamp_type: ScalarDecoder = as_int,
    value_type: ScalarDecoder = as_float,
) -> Command:
    args = [b"TS.MGET"]
    filters.append_tokens(args)
    return Command(args, partial(decode_mget, timestamp_type=timestamp_type, value_type=value_type))


def info_command(key: Scalar) -> Command:
    return Command([b"TS.INFO", encode_scalar(key)], decode_info)


def queryindex_command(filters: FilterOptions) -> Command:
    args = [b"TS.QUERYINDEX"]
    filters.append_expression_tokens(args)
    return Command(args, decode_query_index)


# ---------------------------------------------------------------------------
# Mixins
# ---------------------------------------------------------------------------


class TsCommands:
    """Blocking time series commands over ``self.execute_command``."""

    def _run(self, command: Command) -> Any:
        log.debug("-> %s %d args", command.name, len(command.args) - 1)
        try:
            reply = self.execute_command(*command.args)
        except redis.exceptions.RedisError as e:
            raise error_from_transport(e) from e
        return command.decoder(reply)

    def ts_create(self, key: Scalar, config: SeriesConfig | None = None) -> bool:
        return self._run(create_command(key, config))

    def ts_alter(self, key: Scalar, config: SeriesConfig) -> bool:
        return self._run(alter_command(key, config))

    def ts_add(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return self._run(add_command(key, timestamp, value))

    def ts_add_now(self, key: Scalar, value: Scalar) -> int:
        return self._run(add_command(key, None, value))

    def ts_add_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        """Add a sample, creating the series with ``config`` if it is missing."""
        return self._run(add_command(key, timestamp, value, config))

    def ts_madd(self, samples: Iterable[tuple[Scalar, Timestamp, Scalar]]) -> list[int | ResponseError]:
        return self._run(madd_command(samples))

    def ts_incrby(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return self._run(incrby_command(key, value, timestamp))

    def ts_incrby_now(self, key: Scalar, value: Scalar) -> int:
        return self._run(incrby_command(key, value))

    def ts_incrby_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        return self._run(incrby_command(key, value, timestamp, config))

    def ts_decrby(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return self._run(decrby_command(key, value, timestamp))

    def ts_decrby_now(self, key: Scalar, value: Scalar) -> int:
        return self._run(decrby_command(key, value))

    def ts_decrby_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        return self._run(decrby_command(key, value, timestamp, config))

    def ts_createrule(self, source_key: Scalar, dest_key: Scalar, aggregation: Aggregation) -> bool:
        return self._run(createrule_command(source_key, dest_key, aggregation))

    def ts_deleterule(self, source_key: Scalar, dest_key: Scalar) -> bool:
        return self._run(deleterule_command(source_key, dest_key))

    def ts_range(self, key: Scalar, query: RangeQuery | None = None, **types: ScalarDecoder) -> RangeResult:
        return self._run(range_command(key, query, **types))

    def ts_revrange(self, key: Scalar, query: RangeQuery | None = None, **types: ScalarDecoder) -> RangeResult:
        return self._run(range_command(key, query, reverse=True, **types))

    def ts_mrange(
        self, query: RangeQuery | None, filters: FilterOptions, **types: ScalarDecoder
    ) -> MultiRangeResult:
        return self._run(mrange_command(query, filters, **types))

    def ts_mrevrange(
        self, query: RangeQuery | None, filters: FilterOptions, **types: ScalarDecoder
    ) -> MultiRangeResult:
        return self._run(mrange_command(query, filters, reverse=True, **types))

    def ts_get(self, key: Scalar, **types: ScalarDecoder) -> Sample | None:
        """Latest sample, or ``None`` if the series is empty or the server errors."""
        try:
            return self._run(get_command(key, **types))
        except ResponseError as e:
            log.debug("TS.GET %r resolved to no value: %s", key, e)
            return None

    def ts_mget(self, filters: FilterOptions, **types: ScalarDecoder) -> MultiGetResult:
        return self._run(mget_command(filters, **types))

    def ts_info(self, key: Scalar) -> SeriesInfo:
        return self._run(info_command(key))

    def ts_queryindex(self, filters: FilterOptions) -> list[str]:
        return self._run(queryindex_command(filters))


class AsyncTsCommands:
    """Awaitable time series commands over ``await self.execute_command``."""

    async def _run(self, command: Command) -> Any:
        log.debug("-> %s %d args", command.name, len(command.args) - 1)
        try:
            reply = await self.execute_command(*command.args)
        except redis.exceptions.RedisError as e:
            raise error_from_transport(e) from e
        return command.decoder(reply)

    async def ts_create(self, key: Scalar, config: SeriesConfig | None = None) -> bool:
        return await self._run(create_command(key, config))

    async def ts_alter(self, key: Scalar, config: SeriesConfig) -> bool:
        return await self._run(alter_command(key, config))

    async def ts_add(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return await self._run(add_command(key, timestamp, value))

    async def ts_add_now(self, key: Scalar, value: Scalar) -> int:
        return await self._run(add_command(key, None, value))

    async def ts_add_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        return await self._run(add_command(key, timestamp, value, config))

    async def ts_madd(
        self, samples: Iterable[tuple[Scalar, Timestamp, Scalar]]
    ) -> list[int | ResponseError]:
        return await self._run(madd_command(samples))

    async def ts_incrby(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return await self._run(incrby_command(key, value, timestamp))

    async def ts_incrby_now(self, key: Scalar, value: Scalar) -> int:
        return await self._run(incrby_command(key, value))

    async def ts_incrby_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        return await self._run(incrby_command(key, value, timestamp, config))

    async def ts_decrby(self, key: Scalar, timestamp: Timestamp, value: Scalar) -> int:
        return await self._run(decrby_command(key, value, timestamp))

    async def ts_decrby_now(self, key: Scalar, value: Scalar) -> int:
        return await self._run(decrby_command(key, value))

    async def ts_decrby_create(
        self, key: Scalar, timestamp: Timestamp | None, value: Scalar, config: SeriesConfig
    ) -> int:
        return await self._run(decrby_command(key, value, timestamp, config))

    async def ts_createrule(
        self, source_key: Scalar, dest_key: Scalar, aggregation: Aggregation
    ) -> bool:
        return await self._run(createrule_command(source_key, dest_key, aggregation))

    async def ts_deleterule(self, source_key: Scalar, dest_key: Scalar) -> bool:
        return await self._run(deleterule_command(source_key, dest_key))

    async def ts_range(
        self, key: Scalar, query: RangeQuery | None = None, **types: ScalarDecoder
    ) -> RangeResult:
        return await self._run(range_command(key, query, **types))

    async def ts_revrange(
        self, key: Scalar, query: RangeQuery | None = None, **types: ScalarDecoder
    ) -> RangeResult:
        return await self._run(range_command(key, query, reverse=True, **types))

    async def ts_mrange(
        self, query: RangeQuery | None, filters: FilterOptions, **types: ScalarDecoder
    ) -> MultiRangeResult:
        return await self._run(mrange_command(query, filters, **types))

    async def ts_mrevrange(
        self, query: RangeQuery | None, filters: FilterOptions, **types: ScalarDecoder
    ) -> MultiRangeResult:
        return await self._run(mrange_command(query, filters, reverse=True, **types))

    async def ts_get(self, key: Scalar, **types: ScalarDecoder) -> Sample | None:
        try:
            return await self._run(get_command(key, **types))
        except ResponseError as e:
            log.debug("TS.GET %r resolved to no value: %s", key, e)
            return None

    async def ts_mget(self, filters: FilterOptions, **types: ScalarDecoder) -> MultiGetResult:
        return await self._run(mget_command(filters, **types))

    async def ts_info(self, key: Scalar) -> SeriesInfo:
        return await self._run(info_command(key))

    async def ts_queryindex(self, filters: FilterOptions) -> list[str]:
        return await self._run(queryindex_command(filters))
