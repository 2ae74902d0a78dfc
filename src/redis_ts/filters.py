"""Label filter expressions for TS.MGET, TS.MRANGE and TS.QUERYINDEX.

Example::

    filters = (
        FilterOptions()
        .with_labels(True)
        .equals("sensor", "temperature")
        .in_set("region", ["us", "eu"])
        .has_label("unit")
    )
    filters.to_tokens()
    # [b"WITHLABELS", b"FILTER", b"sensor=temperature",
    #  b"region=(us,eu)", b"unit!="]

At least one expression is required by the server for every command that
takes filters; this is not checked here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from redis_ts.tokens import Token


class Compare(Enum):
    EQ = "="
    NOT_EQ = "!="


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def _format_set(values: Iterable[Any]) -> str:
    return "(" + ",".join(_text(v) for v in values) + ")"


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """A single ``name<cmp>value`` predicate.

    An empty value tests label presence: ``name!=`` means the label
    exists, ``name=`` means it does not.
    """

    name: str
    value: str
    compare: Compare

    def encode(self) -> Token:
        return f"{self.name}{self.compare.value}{self.value}".encode("utf-8")


@dataclass(slots=True)
class FilterOptions:
    """Ordered filter expressions plus the WITHLABELS flag."""

    include_labels: bool = False
    expressions: list[FilterExpression] = field(default_factory=list)

    def with_labels(self, enabled: bool) -> FilterOptions:
        """Ask the server to attach each series' labels to the reply."""
        self.include_labels = enabled
        return self

    def equals(self, name: Any, value: Any) -> FilterOptions:
        return self._push(name, _text(value), Compare.EQ)

    def not_equals(self, name: Any, value: Any) -> FilterOptions:
        return self._push(name, _text(value), Compare.NOT_EQ)

    def in_set(self, name: Any, values: Iterable[Any]) -> FilterOptions:
        return self._push(name, _format_set(values), Compare.EQ)

    def not_in_set(self, name: Any, values: Iterable[Any]) -> FilterOptions:
        return self._push(name, _format_set(values), Compare.NOT_EQ)

    def has_label(self, name: Any) -> FilterOptions:
        return self._push(name, "", Compare.NOT_EQ)

    def lacks_label(self, name: Any) -> FilterOptions:
        return self._push(name, "", Compare.EQ)

    def copy(self) -> FilterOptions:
        return FilterOptions(self.include_labels, list(self.expressions))

    def _push(self, name: Any, value: str, compare: Compare) -> FilterOptions:
        self.expressions.append(FilterExpression(_text(name), value, compare))
        return self

    # ----- serialization -----

    def append_expression_tokens(self, out: list[Token]) -> None:
        """Bare expressions, as TS.QUERYINDEX takes them."""
        out.extend(expr.encode() for expr in self.expressions)

    def append_tokens(self, out: list[Token]) -> None:
        if self.include_labels:
            out.append(b"WITHLABELS")
        out.append(b"FILTER")
        self.append_expression_tokens(out)

    def to_tokens(self) -> list[Token]:
        out: list[Token] = []
        self.append_tokens(out)
        return out
