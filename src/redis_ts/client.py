"""Time series clients over redis-py connections.

Example::

    with TimeSeriesClient.from_config(ClientConfig(host="10.0.10.11")) as ts:
        ts.ts_create("my_engine", SeriesConfig().with_label("sensor", "temperature"))
        ts.ts_add("my_engine", 1234, 36.1)
        latest = ts.ts_get("my_engine")

    async with AsyncTimeSeriesClient.from_config(ClientConfig()) as ts:
        result = await ts.ts_mrange(None, FilterOptions().equals("sensor", "temperature"))
"""

from __future__ import annotations

import logging
from typing import Any

import redis
import redis.asyncio

from redis_ts.commands import AsyncTsCommands, TsCommands
from redis_ts.config import ClientConfig

log = logging.getLogger("redis_ts.client")


class TimeSeriesClient(TsCommands):
    """Blocking client. Transport, pooling and retries belong to redis-py."""

    def __init__(self, connection: redis.Redis | None = None, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()
        if connection is None:
            connection = redis.Redis(**self._config.to_redis_kwargs())
            log.info("Opened connection pool for %s", self._config.address)
        self._conn = connection

    @classmethod
    def from_config(cls, config: ClientConfig) -> TimeSeriesClient:
        return cls(config=config)

    @property
    def connection(self) -> redis.Redis:
        """The underlying redis-py connection, for non time series commands."""
        return self._conn

    def execute_command(self, *args: Any) -> Any:
        return self._conn.execute_command(*args)

    def close(self) -> None:
        self._conn.close()
        log.info("Closed connection to %s", self._config.address)

    def __enter__(self) -> TimeSeriesClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class AsyncTimeSeriesClient(AsyncTsCommands):
    """Asyncio client over ``redis.asyncio.Redis``."""

    def __init__(
        self,
        connection: redis.asyncio.Redis | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        if connection is None:
            connection = redis.asyncio.Redis(**self._config.to_redis_kwargs())
            log.info("Opened connection pool for %s", self._config.address)
        self._conn = connection

    @classmethod
    def from_config(cls, config: ClientConfig) -> AsyncTimeSeriesClient:
        return cls(config=config)

    @property
    def connection(self) -> redis.asyncio.Redis:
        return self._conn

    async def execute_command(self, *args: Any) -> Any:
        return await self._conn.execute_command(*args)

    async def close(self) -> None:
        await self._conn.aclose()
        log.info("Closed connection to %s", self._config.address)

    async def __aenter__(self) -> AsyncTimeSeriesClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
