"""Scalar token encoding.

Every command argument travels as an opaque byte string. Numbers are sent
in positional base-10 form (floats use their shortest round-trip digits,
never exponent notation; non-finite floats keep ``inf``/``nan``), text
as UTF-8, byte buffers untouched::

    >>> encode_scalar(60000)
    b'60000'
    >>> encode_scalar(-3)
    b'-3'
    >>> encode_scalar(2.5)
    b'2.5'
    >>> encode_scalar(1e20)
    b'100000000000000000000'
    >>> encode_scalar("engine")
    b'engine'

A token sink is a plain ``list`` that builders append to.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Union

Token = bytes
Scalar = Union[int, float, str, bytes, bytearray, memoryview]

# Sentinel bounds understood by range commands.
EARLIEST = b"-"
LATEST = b"+"
AUTO_TIMESTAMP = b"*"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)
    return format(Decimal(repr(value)), "f")


def encode_scalar(value: Scalar) -> Token:
    """Encode a single scalar as a wire token."""
    # bool is an int subclass but has no wire form.
    if isinstance(value, bool):
        raise TypeError("Cannot encode bool as a command argument")
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, float):
        return _format_float(value).encode("ascii")
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Unsupported argument type: {type(value).__name__}")


def encode_all(values) -> list[Token]:
    """Encode an iterable of scalars."""
    return [encode_scalar(v) for v in values]


def to_milliseconds(value: Scalar | datetime | timedelta) -> Scalar:
    """Normalize datetimes (epoch ms) and timedeltas (duration ms).

    Anything else is returned unchanged so sentinels like ``"-"`` and
    ``"*"`` pass through.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _EPOCH) // timedelta(milliseconds=1)
    if isinstance(value, timedelta):
        return value // timedelta(milliseconds=1)
    return value


def encode_timestamp(value: Scalar | datetime) -> Token:
    """Encode a timestamp argument, accepting datetimes."""
    return encode_scalar(to_milliseconds(value))
