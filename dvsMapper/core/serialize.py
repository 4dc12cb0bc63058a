"""
Thin-Edge JSON Serializer

GroupedMeasurementVisitor that writes the measurement stream as one JSON
object:

    {"time":"2021-04-08T12:00:00+00:00","temperature":25.5,
     "location":{"alti":2100.4,"longi":2200.4}}

- "time" holds the RFC 3339 timestamp (explicit, or the default one added
  at finalize when none was given)
- Scalars are written as shortest round-trip decimals
- Keys go through the writer's escaping, any name is accepted
- intoBytes()/intoString() finalize the document exactly once

A failed call leaves the document as it was before the call.
"""

from datetime import datetime
from typing import Optional

from sdk.jsonWriter import JsonWriter, JsonWriterError
from .measurement import GroupedMeasurementVisitor, GroupStateMachine, requireAware


TIME_KEY = "time"


def formatRfc3339(timestamp: datetime) -> str:
    return requireAware(timestamp).isoformat()


class ThinEdgeJsonSerializer(GroupedMeasurementVisitor):
    """Accumulates grouped measurements into a thin-edge JSON document"""

    def __init__(self, defaultTimestamp: Optional[datetime] = None):
        """
        Args:
            defaultTimestamp: Written as "time" at finalize if timestamp() was never called
        """
        if defaultTimestamp is not None:
            requireAware(defaultTimestamp)
        self.defaultTimestamp = defaultTimestamp
        self._states = GroupStateMachine()
        self._needsSeparator = False
        self._json: Optional[JsonWriter] = JsonWriter()
        self._json.writeOpenObj()

    # ===== Protocol =====
    def timestamp(self, timestamp: datetime) -> None:
        json = self._writer()
        self._states.checkTimestamp()
        value = formatRfc3339(timestamp)

        self._writeEntry(json, TIME_KEY, lambda: json.writeStr(value))
        self._states.markTimestamp()

    def measurement(self, name: str, value: float) -> None:
        json = self._writer()
        self._writeEntry(json, name, lambda: json.writeF64(value))

    def startGroup(self, group: str) -> None:
        json = self._writer()
        self._states.checkStartGroup()

        self._writeEntry(json, group, json.writeOpenObj)
        self._needsSeparator = False
        self._states.enterGroup()

    def endGroup(self) -> None:
        json = self._writer()
        self._states.checkEndGroup()

        json.writeCloseObj()
        self._needsSeparator = True
        self._states.leaveGroup()

    # ===== Finalize =====
    def intoBytes(self) -> bytes:
        """
        Close the document and return it.

        The serializer is consumed by the first call, whether it succeeds
        or not: on failure the partial document is discarded.

        Raises:
            UnexpectedEndOfData: A group is still open
            RuntimeError: The serializer was already finalized
        """
        json = self._writer()
        self._json = None

        self._states.checkEndOfData()
        if not self._states.timestampPresent and self.defaultTimestamp is not None:
            value = formatRfc3339(self.defaultTimestamp)
            if self._needsSeparator:
                json.writeSeparator()
            json.writeKey(TIME_KEY)
            json.writeStr(value)

        json.writeCloseObj()
        return json.intoBytes()

    def intoString(self) -> str:
        return self.intoBytes().decode('utf-8')

    @property
    def isFinalized(self) -> bool:
        return self._json is None

    # ===== Helper Methods =====
    def _writer(self) -> JsonWriter:
        if self._json is None:
            raise RuntimeError("ThinEdgeJsonSerializer already finalized")
        return self._json

    def _writeEntry(self, json: JsonWriter, key: str, writeValue) -> None:
        mark = json.checkpoint()
        try:
            if self._needsSeparator:
                json.writeSeparator()
            json.writeKey(key)
            writeValue()
        except JsonWriterError:
            json.rollback(mark)
            raise
        self._needsSeparator = True
