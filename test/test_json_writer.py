"""
JsonWriter Tests

Low-level primitives: structure, escaping, float formatting, rollback.
"""

import math
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sdk.jsonWriter import JsonWriter, JsonWriterError


class TestJsonWriter:
    """Writer primitives"""

    def test_object_with_entries(self):
        json = JsonWriter()
        json.writeOpenObj()
        json.writeKey("a")
        json.writeF64(1.5)
        json.writeSeparator()
        json.writeKey("b")
        json.writeStr("text")
        json.writeCloseObj()
        assert json.intoString() == '{"a":1.5,"b":"text"}'
        assert json.intoBytes() == b'{"a":1.5,"b":"text"}'

    def test_string_escaping(self):
        json = JsonWriter()
        json.writeStr('say "hi"\n')
        assert json.intoString() == '"say \\"hi\\"\\n"'

    def test_unicode_kept_as_utf8(self):
        json = JsonWriter()
        json.writeStr("°C")
        assert json.intoBytes() == '"°C"'.encode('utf-8')

    @pytest.mark.parametrize("value,expected", [
        (25.5, b"25.5"),
        (255.0, b"255.0"),
        (0.1, b"0.1"),
        (-2.0, b"-2.0"),
        (7, b"7.0"),
    ])
    def test_f64_formatting(self, value, expected):
        json = JsonWriter()
        json.writeF64(value)
        assert json.intoBytes() == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value):
        json = JsonWriter()
        with pytest.raises(JsonWriterError):
            json.writeF64(value)
        assert len(json) == 0

    def test_non_string_key_rejected(self):
        with pytest.raises(JsonWriterError):
            JsonWriter().writeKey(42)

    def test_surrogate_rejected(self):
        with pytest.raises(JsonWriterError):
            JsonWriter().writeStr("\udc80")

    def test_rollback(self):
        json = JsonWriter()
        json.writeOpenObj()
        mark = json.checkpoint()
        json.writeKey("partial")
        json.rollback(mark)
        json.writeCloseObj()
        assert json.intoString() == "{}"

    @pytest.mark.parametrize("value", [None, "1.5", True, False, b"1"])
    def test_non_numeric_rejected(self, value):
        json = JsonWriter()
        with pytest.raises(JsonWriterError):
            json.writeF64(value)
        assert len(json) == 0

    def test_integer_too_large_rejected(self):
        json = JsonWriter()
        with pytest.raises(JsonWriterError):
            json.writeF64(10**400)
        assert len(json) == 0
