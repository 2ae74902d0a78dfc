"""Time series client error types."""

from __future__ import annotations

import redis.exceptions


class TimeSeriesError(Exception):
    """Base exception for all time series client errors."""

    def is_retryable(self) -> bool:
        """Whether this error is transient and the command can be re-issued.

        Retryable errors: ConnectionError, TimeoutError.
        """
        return False


class ConnectionError(TimeSeriesError):
    """Connection-level errors (refused, closed, DNS failure)."""

    def is_retryable(self) -> bool:
        return True


class TimeoutError(TimeSeriesError):
    """Command exceeded its deadline."""

    def is_retryable(self) -> bool:
        return True


class ProtocolError(TimeSeriesError):
    """A reply did not match what the protocol allows."""


class MalformedReplyError(ProtocolError):
    """Reply tree has the wrong shape (arity, top-level type, scalar type)."""

    def __init__(self, message: str, reply: object = None) -> None:
        super().__init__(message)
        self.reply = reply


class UnrecognizedVariantError(ProtocolError):
    """A server-reported name is not a member of a known closed set."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"Unrecognized {kind}: {name!r}")
        self.kind = kind
        self.name = name


class ResponseError(TimeSeriesError):
    """The server answered the command with an error reply."""


class KeyNotFoundError(ResponseError):
    """The series key does not exist."""


class KeyExistsError(ResponseError):
    """TS.CREATE on a key that already exists."""


class DuplicateSampleError(ResponseError):
    """Insert rejected by the series' duplicate policy."""


# Server error messages are free text; match on stable fragments.
ERROR_MESSAGE_MAP: list[tuple[str, type[ResponseError]]] = [
    ("key does not exist", KeyNotFoundError),
    ("key already exists", KeyExistsError),
    ("duplicate_policy", DuplicateSampleError),
    ("duplicate policy", DuplicateSampleError),
]


def error_from_reply(message: str | bytes) -> ResponseError:
    """Create the appropriate exception from a server error reply."""
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    lowered = message.lower()
    for fragment, exc_class in ERROR_MESSAGE_MAP:
        if fragment in lowered:
            return exc_class(message)
    return ResponseError(message)


def error_from_transport(exc: Exception) -> TimeSeriesError:
    """Translate a redis-py exception into this package's taxonomy."""
    if isinstance(exc, TimeSeriesError):
        return exc
    # TimeoutError subclasses ConnectionError in some redis-py releases.
    if isinstance(exc, redis.exceptions.TimeoutError):
        return TimeoutError(str(exc))
    if isinstance(exc, redis.exceptions.ConnectionError):
        return ConnectionError(str(exc))
    if isinstance(exc, redis.exceptions.ResponseError):
        return error_from_reply(str(exc))
    return TimeSeriesError(str(exc))
