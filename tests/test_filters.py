"""Tests for label filter expressions."""

from redis_ts.filters import Compare, FilterExpression, FilterOptions


class TestFilterExpression:
    """Test single-expression rendering."""

    def test_equals(self):
        assert FilterExpression("sensor", "temperature", Compare.EQ).encode() == b"sensor=temperature"

    def test_not_equals(self):
        assert FilterExpression("sensor", "x", Compare.NOT_EQ).encode() == b"sensor!=x"


class TestFilterOptions:
    """Test FilterOptions builder and token rendering."""

    def test_equals_and_in_set(self):
        filters = FilterOptions().equals("sensor", "temperature").in_set("region", ["us", "eu"])
        assert filters.to_tokens() == [b"FILTER", b"sensor=temperature", b"region=(us,eu)"]

    def test_with_labels_first(self):
        filters = FilterOptions().equals("a", 1).with_labels(True)
        assert filters.to_tokens() == [b"WITHLABELS", b"FILTER", b"a=1"]

    def test_not_in_set(self):
        assert FilterOptions().not_in_set("x", [1, 2, 3]).to_tokens() == [b"FILTER", b"x!=(1,2,3)"]

    def test_presence(self):
        filters = FilterOptions().has_label("unit").lacks_label("legacy")
        assert filters.to_tokens() == [b"FILTER", b"unit!=", b"legacy="]

    def test_order_preserved(self):
        filters = FilterOptions().not_equals("b", "2").equals("a", "1")
        assert filters.to_tokens() == [b"FILTER", b"b!=2", b"a=1"]

    def test_bare_expressions(self):
        out = [b"TS.QUERYINDEX"]
        FilterOptions().with_labels(True).equals("a", "1").append_expression_tokens(out)
        assert out == [b"TS.QUERYINDEX", b"a=1"]

    def test_bytes_names_and_values(self):
        filters = FilterOptions().equals(b"sensor", b"temp").in_set("region", [b"us", bytearray(b"eu")])
        assert filters.to_tokens() == [b"FILTER", b"sensor=temp", b"region=(us,eu)"]

    def test_bytes_not_equals(self):
        assert FilterOptions().not_equals(b"unit", b"c").has_label(b"loc").to_tokens() == [
            b"FILTER",
            b"unit!=c",
            b"loc!=",
        ]

    def test_copy_is_independent(self):
        filters = FilterOptions().equals("a", "1")
        clone = filters.copy().equals("b", "2")
        assert len(filters.expressions) == 1
        assert len(clone.expressions) == 2
