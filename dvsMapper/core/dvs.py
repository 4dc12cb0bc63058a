"""
DVS Measurement Grammar

Decodes DVS telemetry messages into typed measurements.

Topic grammar (exactly four '/'-separated segments):
    <prefix>/<host>/<metricGroupKey>/<metricKey>
    e.g. dvs/localhost/temperature/value

Payload grammar (exactly two ':'-separated numeric fields, UTF-8):
    <timestamp>:<value>
    e.g. 123456789:32.5

Contract:
- Pure functions, no logging, no I/O
- Segments 1-2 of the topic must be present but are not used
- Keys are taken verbatim (no character validation)
- The payload timestamp is validated as a number, then dropped
- Topic errors are always reported as InvalidMeasurementTopic
- Payload errors are always reported as InvalidMeasurementPayload,
  which keeps the originating topic for diagnostics
"""

import re
from dataclasses import dataclass


# Decimal or scientific literal, or inf/infinity/nan spellings (optional sign)
_FLOAT_PATTERN = re.compile(
    r'[+-]?(?:(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)',
    re.IGNORECASE
)


def parseF64(text: str) -> float:
    """
    Parse a 64-bit float using the measurement number grammar.

    Stricter than float(): surrounding whitespace, underscores and other
    forms float() tolerates are rejected. Magnitudes beyond the double range
    saturate to +/-inf.

    Raises:
        ValueError: If text is not a number
    """
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError(f"not a number: {text!r}")
    return float(text)


# ============================================================================
# Errors
# ============================================================================

class InvalidDvsTopicName(ValueError):
    """Topic does not have exactly four segments"""

    def __init__(self, topic: str):
        super().__init__(f"Invalid dvs topic name: {topic}")
        self.topic = topic


class DvsPayloadError(ValueError):
    """Base class for payload grammar errors"""
    pass


class NonUtf8MeasurementPayload(DvsPayloadError):

    def __init__(self, payload: bytes):
        super().__init__(f"Non UTF-8 payload: {payload!r}")
        self.payload = payload


class InvalidMeasurementPayloadFormat(DvsPayloadError):

    def __init__(self, payload: str):
        super().__init__(f"Invalid payload: {payload}. Expected payload format: <timestamp>:<value>")
        self.payload = payload


class InvalidMeasurementTimestamp(DvsPayloadError):

    def __init__(self, value: str):
        super().__init__(f"Invalid measurement timestamp: {value}. Epoch time value expected")
        self.value = value


class InvalidMeasurementValue(DvsPayloadError):

    def __init__(self, value: str):
        super().__init__(f"Invalid measurement value: {value}. Must be a number")
        self.value = value


class DvsError(Exception):
    """Base class for measurement decode errors"""
    pass


class InvalidMeasurementTopic(DvsError):
    """Message received on a topic that is not a DVS measurement topic"""

    def __init__(self, topic: str):
        super().__init__(
            f"Message received on invalid dvs topic: {topic}. "
            f"Dvs message topics must be in the format <prefix>/<host>/<metricGroupKey>/<metricKey>"
        )
        self.topic = topic


class InvalidMeasurementPayload(DvsError):
    """Message received on a valid topic with an invalid payload"""

    def __init__(self, topic: str, payloadError: DvsPayloadError):
        super().__init__(f"Invalid payload received on topic: {topic}. Error: {payloadError}")
        self.topic = topic
        self.payloadError = payloadError


# ============================================================================
# Topic / Payload parsers
# ============================================================================

@dataclass(frozen=True)
class DvsTopic:
    metricGroupKey: str
    metricKey: str

    @staticmethod
    def fromStr(topic: str) -> 'DvsTopic':
        """
        Split a topic into its group and metric keys.

        Raises:
            InvalidDvsTopicName: Fewer or more than four segments
        """
        segments = topic.split('/')
        if len(segments) != 4:
            raise InvalidDvsTopicName(topic)

        _prefix, _host, metricGroupKey, metricKey = segments
        return DvsTopic(metricGroupKey=metricGroupKey, metricKey=metricKey)


@dataclass(frozen=True)
class DvsPayload:
    metricValue: float

    @staticmethod
    def parseFrom(payload: bytes) -> 'DvsPayload':
        """
        Parse a trimmed payload into its measurement value.

        Steps short-circuit in order: UTF-8, timestamp field, value field,
        field count.

        Raises:
            DvsPayloadError: One of its four subclasses
        """
        try:
            text = bytes(payload).decode('utf-8')
        except UnicodeDecodeError:
            raise NonUtf8MeasurementPayload(payload) from None

        fields = text.split(':')

        # Timestamp is validated but not part of the measurement
        timestampField = fields[0]
        try:
            parseF64(timestampField)
        except ValueError:
            raise InvalidMeasurementTimestamp(timestampField) from None

        if len(fields) < 2:
            raise InvalidMeasurementPayloadFormat(text)

        valueField = fields[1]
        try:
            metricValue = parseF64(valueField)
        except ValueError:
            raise InvalidMeasurementValue(valueField) from None

        if len(fields) > 2:
            raise InvalidMeasurementPayloadFormat(text)

        return DvsPayload(metricValue=metricValue)


# ============================================================================
# Decoder
# ============================================================================

@dataclass(frozen=True)
class DvsMessage:
    """Decoded DVS measurement"""
    metricGroupKey: str
    metricKey: str
    metricValue: float

    @staticmethod
    def parseFrom(topic: str, payload: bytes) -> 'DvsMessage':
        """
        Decode a (topic, trimmed payload) pair.

        Args:
            topic: Transport topic name
            payload: Payload bytes, trailing NUL already stripped

        Returns:
            DvsMessage with the topic's keys and the payload's value

        Raises:
            InvalidMeasurementTopic: Topic is not four segments
            InvalidMeasurementPayload: Payload grammar failure (topic kept)
        """
        try:
            dvsTopic = DvsTopic.fromStr(topic)
        except InvalidDvsTopicName:
            raise InvalidMeasurementTopic(topic) from None

        try:
            dvsPayload = DvsPayload.parseFrom(payload)
        except DvsPayloadError as e:
            raise InvalidMeasurementPayload(topic, e) from e

        return DvsMessage(
            metricGroupKey=dvsTopic.metricGroupKey,
            metricKey=dvsTopic.metricKey,
            metricValue=dvsPayload.metricValue
        )
