"""Series configuration and duplicate-insert policies.

A :class:`SeriesConfig` carries the options shared by TS.CREATE, TS.ALTER,
TS.ADD, TS.INCRBY and TS.DECRBY::

    cfg = (
        SeriesConfig()
        .with_retention(60000)
        .with_duplicate_policy(DuplicatePolicy.LAST)
        .with_chunk_size(8192)
        .with_label("component", "engine")
    )
    cfg.to_tokens()
    # [b"RETENTION", b"60000", b"DUPLICATE_POLICY", b"LAST",
    #  b"CHUNK_SIZE", b"8192", b"LABELS", b"component", b"engine"]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from redis_ts.errors import UnrecognizedVariantError
from redis_ts.tokens import Token, encode_scalar, to_milliseconds

log = logging.getLogger("redis_ts.options")


class DuplicatePolicy(Enum):
    """How the server resolves two samples with the same timestamp."""

    BLOCK = "BLOCK"
    FIRST = "FIRST"
    LAST = "LAST"
    MIN = "MIN"
    MAX = "MAX"

    def append_tokens(self, out: list[Token]) -> None:
        out.append(b"DUPLICATE_POLICY")
        out.append(self.value.encode("ascii"))

    @classmethod
    def lookup(cls, name: str) -> DuplicatePolicy:
        """Strict, case-insensitive lookup.

        Raises:
            redis_ts.errors.UnrecognizedVariantError: for unknown names.
        """
        try:
            return cls(name.upper())
        except ValueError:
            raise UnrecognizedVariantError("duplicate policy", name) from None

    @classmethod
    def parse(cls, name: str | bytes) -> DuplicatePolicy | OtherDuplicatePolicy:
        """Decode a server-reported policy name, never failing.

        Names outside the known set come back as :class:`OtherDuplicatePolicy`.
        """
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="replace")
        try:
            return cls.lookup(name.lower())
        except UnrecognizedVariantError as e:
            log.debug("%s, keeping as OtherDuplicatePolicy", e)
            return OtherDuplicatePolicy(name)


@dataclass(frozen=True, slots=True)
class OtherDuplicatePolicy:
    """A policy name this client does not know, sent and kept verbatim."""

    name: str

    @property
    def value(self) -> str:
        return self.name

    def append_tokens(self, out: list[Token]) -> None:
        out.append(b"DUPLICATE_POLICY")
        out.append(encode_scalar(self.name))


AnyDuplicatePolicy = DuplicatePolicy | OtherDuplicatePolicy


@dataclass(slots=True)
class SeriesConfig:
    """Options for creating or altering a series.

    Labels are kept in insertion order and may repeat; the server replaces
    a series' whole label set on every call that carries ``LABELS``.
    """

    retention_ms: int | None = None
    uncompressed: bool = False
    duplicate_policy: AnyDuplicatePolicy | None = None
    chunk_size: int | None = None
    labels: list[tuple[str, str]] = field(default_factory=list)

    def with_retention(self, retention: int | timedelta) -> SeriesConfig:
        self.retention_ms = to_milliseconds(retention)
        return self

    def with_uncompressed(self, enabled: bool) -> SeriesConfig:
        """Only honoured by TS.CREATE (and auto-creating adds)."""
        self.uncompressed = enabled
        return self

    def with_duplicate_policy(self, policy: AnyDuplicatePolicy) -> SeriesConfig:
        self.duplicate_policy = policy
        return self

    def with_chunk_size(self, size: int) -> SeriesConfig:
        self.chunk_size = size
        return self

    def with_label(self, name: str, value: str) -> SeriesConfig:
        self.labels.append((name, value))
        return self

    def with_labels(self, labels: list[tuple[str, str]]) -> SeriesConfig:
        """Replace all labels. An empty list clears them."""
        self.labels = list(labels)
        return self

    def copy(self) -> SeriesConfig:
        return SeriesConfig(
            retention_ms=self.retention_ms,
            uncompressed=self.uncompressed,
            duplicate_policy=self.duplicate_policy,
            chunk_size=self.chunk_size,
            labels=list(self.labels),
        )

    def without_uncompressed(self) -> SeriesConfig:
        """Copy with UNCOMPRESSED dropped, for TS.ALTER."""
        cfg = self.copy()
        cfg.uncompressed = False
        return cfg

    # ----- serialization -----

    def append_tokens(self, out: list[Token]) -> None:
        if self.retention_ms is not None:
            out.append(b"RETENTION")
            out.append(encode_scalar(self.retention_ms))

        if self.uncompressed:
            out.append(b"UNCOMPRESSED")

        if self.duplicate_policy is not None:
            self.duplicate_policy.append_tokens(out)

        if self.chunk_size is not None:
            out.append(b"CHUNK_SIZE")
            out.append(encode_scalar(self.chunk_size))

        if self.labels:
            out.append(b"LABELS")
            for name, value in self.labels:
                out.append(encode_scalar(name))
                out.append(encode_scalar(value))

    def to_tokens(self) -> list[Token]:
        out: list[Token] = []
        self.append_tokens(out)
        return out
