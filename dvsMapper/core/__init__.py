"""dvsMapper.core - Measurement grammar, protocol and serialization."""

from .dvs import (
    DvsMessage, DvsTopic, DvsPayload, parseF64,
    DvsError, InvalidMeasurementTopic, InvalidMeasurementPayload,
    InvalidDvsTopicName, DvsPayloadError, NonUtf8MeasurementPayload,
    InvalidMeasurementPayloadFormat, InvalidMeasurementTimestamp, InvalidMeasurementValue
)
from .measurement import (
    GroupState, GroupedMeasurementVisitor, MeasurementGroup, MeasurementGrouper,
    MeasurementStreamError, UnexpectedTimestamp, UnexpectedStartOfGroup,
    UnexpectedEndOfGroup, UnexpectedEndOfData
)
from .serialize import ThinEdgeJsonSerializer
from .converter import DvsConverter
from .mapperService import MapperService, MapperError
