"""Tests for payload encoding and numeric normalization."""

from __future__ import annotations

import pytest

from docstore import codec
from docstore.codec import JsonNumber
from docstore.errors import CodecError


class TestNormalize:
    def test_int_first(self):
        assert codec.normalize(JsonNumber("2")) == 2
        assert isinstance(codec.normalize(JsonNumber("2")), int)

    def test_float(self):
        value = codec.normalize(JsonNumber("2.3"))
        assert isinstance(value, float)
        assert value == 2.3

    def test_exponent_is_float(self):
        value = codec.normalize(JsonNumber("1e3"))
        assert isinstance(value, float)
        assert value == 1000.0

    def test_int64_overflow_becomes_float(self):
        value = codec.normalize(JsonNumber("9223372036854775808"))
        assert isinstance(value, float)

    def test_int64_bounds_stay_int(self):
        assert codec.normalize(JsonNumber("9223372036854775807")) == 2**63 - 1
        assert codec.normalize(JsonNumber("-9223372036854775808")) == -(2**63)

    def test_out_of_range_float_keeps_text(self):
        value = codec.normalize(JsonNumber("1e999"))
        assert value == "1e999"
        assert type(value) is str

    def test_walks_nested_structures(self):
        raw = {"a": [JsonNumber("1"), {"b": JsonNumber("2.5")}], "s": "x", "t": True}
        assert codec.normalize(raw) == {"a": [1, {"b": 2.5}], "s": "x", "t": True}


class TestRoundTrip:
    def test_mixed_values(self):
        doc = codec.decode(codec.encode({"n": 2, "f": 2.3, "s": "hello"}))
        assert doc == {"n": 2, "f": 2.3, "s": "hello"}
        assert type(doc["n"]) is int
        assert type(doc["f"]) is float

    def test_deep_nesting(self):
        value = {"l": [[[{"n": 2, "f": 2.3, "s": "hello"}]]]}
        out = codec.decode(codec.encode(value))
        inner = out["l"][0][0][0]
        assert type(inner["n"]) is int
        assert type(inner["f"]) is float
        assert inner["s"] == "hello"

    def test_whole_float_stays_float(self):
        out = codec.decode(codec.encode({"x": 2.0}))
        assert type(out["x"]) is float

    def test_strings_that_look_numeric_untouched(self):
        out = codec.decode(codec.encode({"s": "42"}))
        assert out["s"] == "42"

    def test_encode_is_compact_and_sorted(self):
        assert codec.encode({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


class TestErrors:
    def test_malformed(self):
        with pytest.raises(CodecError):
            codec.decode("{not json")

    def test_unencodable(self):
        with pytest.raises(CodecError):
            codec.encode({"x": object()})

    def test_decode_object_requires_mapping(self):
        assert codec.decode("[1, 2]") == [1, 2]
        with pytest.raises(CodecError):
            codec.decode_object("[1, 2]")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_rejected(self, value):
        with pytest.raises(CodecError):
            codec.encode({"x": value})
