"""
Grouped Measurement Protocol

Capability set implemented by every consumer of a measurement stream:
    timestamp(ts)          # top level only, at most once
    measurement(name, v)   # top level or inside the open group
    startGroup(name)       # top level only (groups nest one level deep)
    endGroup()             # inside a group only

End of stream is implementation specific (serializer: intoBytes(), grouper:
intoMeasurementGroup()) and is legal only at top level.

States:
    TOP_LEVEL --startGroup--> WITHIN_GROUP --endGroup--> TOP_LEVEL
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class GroupState(Enum):
    TOP_LEVEL = "topLevel"
    WITHIN_GROUP = "withinGroup"


# ============================================================================
# Errors
# ============================================================================

class MeasurementStreamError(Exception):
    """Measurement event received in a state that does not allow it"""
    message = "Invalid measurement stream"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class UnexpectedTimestamp(MeasurementStreamError):
    message = "Unexpected time stamp within a group"


class UnexpectedStartOfGroup(MeasurementStreamError):
    message = "Unexpected start of group"


class UnexpectedEndOfGroup(MeasurementStreamError):
    message = "Unexpected end of group"


class UnexpectedEndOfData(MeasurementStreamError):
    message = "Unexpected end of data"


def requireAware(timestamp: datetime) -> datetime:
    """Reject naive datetimes and offsets RFC 3339 cannot express (only whole minutes)"""
    if not isinstance(timestamp, datetime):
        raise TypeError(f"Expected datetime, got {type(timestamp).__name__}")
    offset = timestamp.utcoffset() if timestamp.tzinfo is not None else None
    if offset is None:
        raise ValueError(f"Timestamp must be timezone-aware: {timestamp.isoformat()}")
    if offset.seconds % 60 or offset.microseconds:
        raise ValueError(f"UTC offset must be whole minutes: {offset}")
    return timestamp


# ============================================================================
# State machine
# ============================================================================

class GroupStateMachine:
    """
    Shared transition rules for protocol implementations.

    check*() methods raise before anything is written; enterGroup(),
    leaveGroup() and markTimestamp() are called once the write succeeded.
    """

    def __init__(self):
        self.state = GroupState.TOP_LEVEL
        self.timestampPresent = False

    @property
    def isWithinGroup(self) -> bool:
        return self.state is GroupState.WITHIN_GROUP

    def checkTimestamp(self):
        if self.isWithinGroup:
            raise UnexpectedTimestamp()
        if self.timestampPresent:
            raise UnexpectedTimestamp("Unexpected second time stamp")

    def checkStartGroup(self):
        if self.isWithinGroup:
            raise UnexpectedStartOfGroup()

    def checkEndGroup(self):
        if not self.isWithinGroup:
            raise UnexpectedEndOfGroup()

    def checkEndOfData(self):
        if self.isWithinGroup:
            raise UnexpectedEndOfData()

    def markTimestamp(self):
        self.timestampPresent = True

    def enterGroup(self):
        self.state = GroupState.WITHIN_GROUP

    def leaveGroup(self):
        self.state = GroupState.TOP_LEVEL


# ============================================================================
# Protocol
# ============================================================================

class GroupedMeasurementVisitor(ABC):
    """Consumer of a grouped measurement stream"""

    @abstractmethod
    def timestamp(self, timestamp: datetime) -> None:
        pass

    @abstractmethod
    def measurement(self, name: str, value: float) -> None:
        pass

    @abstractmethod
    def startGroup(self, group: str) -> None:
        pass

    @abstractmethod
    def endGroup(self) -> None:
        pass


# ============================================================================
# In-memory implementation
# ============================================================================

@dataclass
class MeasurementGroup:
    """Measurements collected by MeasurementGrouper"""
    timestamp: Optional[datetime] = None
    measurements: Dict[str, float] = field(default_factory=dict)
    groups: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def isEmpty(self) -> bool:
        return self.timestamp is None and not self.measurements and not self.groups

    def accept(self, visitor: GroupedMeasurementVisitor) -> None:
        """Replay into another visitor: timestamp, scalars, then groups"""
        if self.timestamp is not None:
            visitor.timestamp(self.timestamp)
        for name, value in self.measurements.items():
            visitor.measurement(name, value)
        for group, values in self.groups.items():
            visitor.startGroup(group)
            for name, value in values.items():
                visitor.measurement(name, value)
            visitor.endGroup()


class MeasurementGrouper(GroupedMeasurementVisitor):
    """
    Collects a measurement stream into a MeasurementGroup.

    Same state machine and errors as ThinEdgeJsonSerializer. Repeated names
    overwrite earlier values. Reopening a group name merges into it.
    """

    def __init__(self, defaultTimestamp: Optional[datetime] = None):
        if defaultTimestamp is not None:
            requireAware(defaultTimestamp)
        self.defaultTimestamp = defaultTimestamp
        self._states = GroupStateMachine()
        self._group: Optional[MeasurementGroup] = MeasurementGroup()
        self._currentGroup: Optional[Dict[str, float]] = None

    def timestamp(self, timestamp: datetime) -> None:
        group = self._document()
        self._states.checkTimestamp()
        group.timestamp = requireAware(timestamp)
        self._states.markTimestamp()

    def measurement(self, name: str, value: float) -> None:
        group = self._document()
        target = self._currentGroup if self._states.isWithinGroup else group.measurements
        target[name] = float(value)

    def startGroup(self, group: str) -> None:
        document = self._document()
        self._states.checkStartGroup()
        self._currentGroup = document.groups.setdefault(group, {})
        self._states.enterGroup()

    def endGroup(self) -> None:
        self._document()
        self._states.checkEndGroup()
        self._currentGroup = None
        self._states.leaveGroup()

    def intoMeasurementGroup(self) -> MeasurementGroup:
        """
        Finish the stream and hand over the collected measurements.

        Raises:
            UnexpectedEndOfData: A group is still open (collected data is discarded)
            RuntimeError: Called again after the first call
        """
        group = self._document()
        self._group = None
        self._states.checkEndOfData()
        if not self._states.timestampPresent and self.defaultTimestamp is not None:
            group.timestamp = self.defaultTimestamp
        return group

    def _document(self) -> MeasurementGroup:
        if self._group is None:
            raise RuntimeError("MeasurementGrouper already finalized")
        return self._group
