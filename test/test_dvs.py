"""
DVS Grammar Tests

Topic grammar, payload grammar and the measurement decoder.

Coverage:
1. Topic: exactly four segments, keys verbatim
2. Payload: UTF-8, timestamp field, value field, field count (in that order)
3. Number grammar: decimal/scientific, saturation, rejected forms
4. Decoder: error wrapping keeps the topic, decoding is repeatable
"""

import math
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dvsMapper.core.dvs import (
    DvsMessage, DvsTopic, DvsPayload, parseF64,
    InvalidDvsTopicName, InvalidMeasurementTopic, InvalidMeasurementPayload,
    NonUtf8MeasurementPayload, InvalidMeasurementPayloadFormat,
    InvalidMeasurementTimestamp, InvalidMeasurementValue, DvsPayloadError
)


class TestDvsTopic:
    """Topic grammar: <prefix>/<host>/<group>/<key>"""

    def test_four_segments(self):
        topic = DvsTopic.fromStr("dvs/localhost/temperature/value")
        assert topic.metricGroupKey == "temperature"
        assert topic.metricKey == "value"

    def test_less_levels(self):
        with pytest.raises(InvalidDvsTopicName) as excInfo:
            DvsTopic.fromStr("dvs/less/levels")
        assert excInfo.value.topic == "dvs/less/levels"

    def test_more_levels(self):
        with pytest.raises(InvalidDvsTopicName):
            DvsTopic.fromStr("dvs/more/levels/than/needed")

    def test_single_segment(self):
        with pytest.raises(InvalidDvsTopicName):
            DvsTopic.fromStr("dvs")

    def test_empty_topic(self):
        with pytest.raises(InvalidDvsTopicName):
            DvsTopic.fromStr("")

    def test_keys_are_verbatim(self):
        """No character validation on keys"""
        topic = DvsTopic.fromStr("x/y/Température ext./val ue\"")
        assert topic.metricGroupKey == "Température ext."
        assert topic.metricKey == "val ue\""

    def test_empty_segments_count(self):
        """Empty segments are still segments"""
        topic = DvsTopic.fromStr("dvs///")
        assert topic.metricGroupKey == ""
        assert topic.metricKey == ""


class TestDvsPayload:
    """Payload grammar: <timestamp>:<value>"""

    def test_valid_payload(self):
        assert DvsPayload.parseFrom(b"123456789:32.5").metricValue == 32.5

    def test_no_separator(self):
        with pytest.raises(InvalidMeasurementPayloadFormat) as excInfo:
            DvsPayload.parseFrom(b"123456789")
        assert excInfo.value.payload == "123456789"

    def test_more_separators(self):
        with pytest.raises(InvalidMeasurementPayloadFormat) as excInfo:
            DvsPayload.parseFrom(b"123456789:98.6:abc")
        assert excInfo.value.payload == "123456789:98.6:abc"

    def test_invalid_metric_value(self):
        with pytest.raises(InvalidMeasurementValue) as excInfo:
            DvsPayload.parseFrom(b"123456789:abc")
        assert excInfo.value.value == "abc"

    def test_invalid_metric_timestamp(self):
        with pytest.raises(InvalidMeasurementTimestamp) as excInfo:
            DvsPayload.parseFrom(b"abc:98.6")
        assert excInfo.value.value == "abc"

    def test_empty_value_field(self):
        with pytest.raises(InvalidMeasurementValue):
            DvsPayload.parseFrom(b"123456789:")

    def test_empty_payload(self):
        """Empty text is an empty timestamp field"""
        with pytest.raises(InvalidMeasurementTimestamp):
            DvsPayload.parseFrom(b"")

    def test_non_utf8_payload(self):
        with pytest.raises(NonUtf8MeasurementPayload) as excInfo:
            DvsPayload.parseFrom(b"\xff\xfe:1.0")
        assert excInfo.value.payload == b"\xff\xfe:1.0"

    def test_check_order_timestamp_before_field_count(self):
        """A bad timestamp is reported even when the field count is also wrong"""
        with pytest.raises(InvalidMeasurementTimestamp):
            DvsPayload.parseFrom(b"abc")

    def test_check_order_value_before_extra_fields(self):
        with pytest.raises(InvalidMeasurementValue):
            DvsPayload.parseFrom(b"1:abc:2")

    def test_timestamp_is_not_retained(self):
        """Value is the second field regardless of the first"""
        assert DvsPayload.parseFrom(b"0:7.25").metricValue == 7.25
        assert DvsPayload.parseFrom(b"-1.5e3:7.25").metricValue == 7.25

    def test_trailing_nul_is_not_trimmed_here(self):
        """Trimming is the transport's job"""
        with pytest.raises(InvalidMeasurementValue):
            DvsPayload.parseFrom(b"123456789:32.5\x00")

    def test_all_errors_are_payload_errors(self):
        for payload in (b"\xff", b"x:1", b"1", b"1:x", b"1:2:3"):
            with pytest.raises(DvsPayloadError):
                DvsPayload.parseFrom(payload)

    def test_very_large_metric_value(self):
        payload = f"123456789:{2**128 - 1}".encode()
        assert DvsPayload.parseFrom(payload).metricValue == float(2**128 - 1)

    def test_very_small_metric_value(self):
        payload = f"123456789:{-2**127}".encode()
        assert DvsPayload.parseFrom(payload).metricValue == float(-2**127)

    def test_out_of_range_saturates_to_infinity(self):
        assert DvsPayload.parseFrom(b"1:1e400").metricValue == math.inf
        assert DvsPayload.parseFrom(b"1:-1e400").metricValue == -math.inf

    def test_out_of_range_timestamp_is_accepted(self):
        assert DvsPayload.parseFrom(b"1e400:1").metricValue == 1.0

    def test_non_finite_literals_are_accepted(self):
        """Documented edge case: inf/nan spellings parse like any float literal"""
        assert DvsPayload.parseFrom(b"1:inf").metricValue == math.inf
        assert DvsPayload.parseFrom(b"1:-Infinity").metricValue == -math.inf
        assert math.isnan(DvsPayload.parseFrom(b"1:NaN").metricValue)
        assert DvsPayload.parseFrom(b"nan:2").metricValue == 2.0


class TestNumberGrammar:
    """parseF64 accepts decimal and scientific literals only"""

    @pytest.mark.parametrize("text,expected", [
        ("32.5", 32.5),
        ("-4", -4.0),
        ("+4", 4.0),
        ("1.", 1.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("2.5E-2", 0.025),
        ("007", 7.0),
    ])
    def test_accepted(self, text, expected):
        assert parseF64(text) == expected

    @pytest.mark.parametrize("text", [
        "", " 1", "1 ", "1_000", "0x10", ".", "e5", "1e", "--1", "1,5", "abc", "infinit",
    ])
    def test_rejected(self, text):
        with pytest.raises(ValueError):
            parseF64(text)


class TestDvsMessage:
    """Decoder composing topic and payload grammar"""

    def test_message_parsing(self):
        message = DvsMessage.parseFrom("dvs/localhost/temperature/value", b"123456789:32.5")
        assert message.metricGroupKey == "temperature"
        assert message.metricKey == "value"
        assert message.metricValue == 32.5

    def test_invalid_topic(self):
        with pytest.raises(InvalidMeasurementTopic) as excInfo:
            DvsMessage.parseFrom("dvs/less/levels", b"123456789:32.5")
        assert excInfo.value.topic == "dvs/less/levels"

    def test_topic_checked_before_payload(self):
        with pytest.raises(InvalidMeasurementTopic):
            DvsMessage.parseFrom("dvs/less/levels", b"garbage")

    def test_invalid_payload_keeps_topic(self):
        with pytest.raises(InvalidMeasurementPayload) as excInfo:
            DvsMessage.parseFrom("dvs/host/group/key", b"123456789")
        error = excInfo.value
        assert error.topic == "dvs/host/group/key"
        assert isinstance(error.payloadError, InvalidMeasurementPayloadFormat)
        assert error.__cause__ is error.payloadError
        assert "dvs/host/group/key" in str(error)

    def test_invalid_timestamp_wrapped(self):
        with pytest.raises(InvalidMeasurementPayload) as excInfo:
            DvsMessage.parseFrom("dvs/host/group/key", b"abc:98.6")
        assert isinstance(excInfo.value.payloadError, InvalidMeasurementTimestamp)

    def test_decoding_is_repeatable(self):
        first = DvsMessage.parseFrom("dvs/h/pressure/bar", b"1:1.013")
        second = DvsMessage.parseFrom("dvs/h/pressure/bar", b"1:1.013")
        assert first == second

    def test_accepts_memoryview_payload(self):
        message = DvsMessage.parseFrom("dvs/h/g/k", memoryview(b"1:2"))
        assert message.metricValue == 2.0
