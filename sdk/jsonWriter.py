"""
JsonWriter: Low-level, append-only JSON text writer.

Primitives:
    writeOpenObj() / writeCloseObj()   # { }
    writeKey(name)                     # "name":  (escaped)
    writeStr(value)                    # "value"  (escaped)
    writeF64(value)                    # shortest round-trip decimal
    writeSeparator()                   # ,
    intoString() / intoBytes()

Design:
    - The writer does not track structure, callers own well-formedness
    - String escaping and float formatting delegated to orjson
    - Non-finite floats and non-numeric values are rejected (JSON has no NaN/Infinity)
    - checkpoint()/rollback() let callers undo a partially written entry

Property of Uncompromising Sensors LLC.
"""


# Imports
import math
import orjson


class JsonWriterError(Exception):
    """JSON text could not be produced for a value"""
    pass


class JsonWriter:
    """Append-only JSON text buffer."""


    def __init__(self):
        self._buffer = bytearray()


    # ===== Structural Primitives =====
    def writeOpenObj(self) -> None:
        self._buffer += b'{'


    def writeCloseObj(self) -> None:
        self._buffer += b'}'


    def writeSeparator(self) -> None:
        self._buffer += b','


    # ===== Value Primitives =====
    def writeKey(self, name: str) -> None:
        self._buffer += self._encodeStr(name)
        self._buffer += b':'


    def writeStr(self, value: str) -> None:
        self._buffer += self._encodeStr(value)


    def writeF64(self, value: float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise JsonWriterError(f"Expected int or float, got {type(value).__name__}")
        try:
            value = float(value)
        except OverflowError as e:
            raise JsonWriterError(f"Integer too large for f64: {e}") from e
        if not math.isfinite(value):
            raise JsonWriterError(f"Invalid f64 value for JSON: {value}")
        self._buffer += orjson.dumps(value)


    # ===== Buffer Control =====
    def checkpoint(self) -> int:
        return len(self._buffer)


    def rollback(self, position: int) -> None:
        del self._buffer[position:]


    def intoBytes(self) -> bytes:
        return bytes(self._buffer)


    def intoString(self) -> str:
        return self._buffer.decode('utf-8')


    def __len__(self) -> int:
        return len(self._buffer)


    # ===== Helper Methods =====
    @staticmethod
    def _encodeStr(value: str) -> bytes:
        if not isinstance(value, str):
            raise JsonWriterError(f"Expected str, got {type(value).__name__}")
        try:
            return orjson.dumps(value)
        except orjson.JSONEncodeError as e:
            # Lone surrogates cannot be encoded as UTF-8
            raise JsonWriterError(f"Invalid string for JSON: {e}") from e
