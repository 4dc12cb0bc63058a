"""
DVS -> Thin-Edge JSON Converter

Decodes one DVS message and drives it through the grouped measurement
protocol:

    dvs/localhost/temperature/value  +  123456789:32.5
        -> {"temperature":{"value":32.5},"time":"2021-04-08T12:00:00+00:00"}

Errors from the decoder (DvsError), the protocol (MeasurementStreamError)
and the writer (JsonWriterError) propagate unchanged.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from .dvs import DvsMessage
from .measurement import GroupedMeasurementVisitor
from .serialize import ThinEdgeJsonSerializer


def utcNow() -> datetime:
    return datetime.now(timezone.utc)


class DvsConverter:
    """Converts DVS (topic, payload) pairs into thin-edge JSON documents"""

    def __init__(self, addTimestamp: bool = True, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            addTimestamp: Add a "time" entry taken from clock() to every document
            clock: Source of default timestamps (timezone-aware, default: UTC now)
        """
        self.addTimestamp = addTimestamp
        self.clock = clock or utcNow

    def convert(self, topic: str, payload: bytes) -> bytes:
        message = DvsMessage.parseFrom(topic, payload)
        return self.serialize(message)

    def serialize(self, message: DvsMessage) -> bytes:
        defaultTimestamp = self.clock() if self.addTimestamp else None
        serializer = ThinEdgeJsonSerializer(defaultTimestamp=defaultTimestamp)
        self.drive(message, serializer)
        return serializer.intoBytes()

    @staticmethod
    def drive(message: DvsMessage, visitor: GroupedMeasurementVisitor) -> None:
        """Feed one decoded measurement into any protocol implementation"""
        visitor.startGroup(message.metricGroupKey)
        visitor.measurement(message.metricKey, message.metricValue)
        visitor.endGroup()
