"""Connection configuration for the time series clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_PORT = 6379


@dataclass(slots=True)
class ClientConfig:
    """Where and how to reach the store."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    db: int = 0
    username: str | None = None
    password: str | None = None
    connect_timeout_s: float = 10.0
    request_timeout_s: float = 30.0
    ssl: bool = False

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_address(cls, address: str) -> ClientConfig:
        """Parse ``host:port`` (port optional)."""
        host, _, port_str = address.rpartition(":")
        if not host:
            return cls(host=address)
        return cls(host=host, port=int(port_str) if port_str else DEFAULT_PORT)

    def with_host(self, host: str) -> ClientConfig:
        self.host = host
        return self

    def with_port(self, port: int) -> ClientConfig:
        self.port = port
        return self

    def with_db(self, db: int) -> ClientConfig:
        self.db = db
        return self

    def with_credentials(self, username: str | None, password: str) -> ClientConfig:
        self.username = username
        self.password = password
        return self

    def with_connect_timeout(self, timeout_s: float) -> ClientConfig:
        self.connect_timeout_s = timeout_s
        return self

    def with_request_timeout(self, timeout_s: float) -> ClientConfig:
        self.request_timeout_s = timeout_s
        return self

    def with_ssl(self, enabled: bool) -> ClientConfig:
        self.ssl = enabled
        return self

    def to_redis_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``redis.Redis`` / ``redis.asyncio.Redis``."""
        return {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "username": self.username,
            "password": self.password,
            "socket_connect_timeout": self.connect_timeout_s,
            "socket_timeout": self.request_timeout_s,
            "ssl": self.ssl,
        }
