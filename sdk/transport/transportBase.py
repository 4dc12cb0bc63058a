"""
TransportBase: Abstract base for bytes-in/bytes-out publish/subscribe transport.
connect(uri, **opts), publish(topic, bytes), subscribe(topicFilter, handler), close()

Topics use '/' as level separator with MQTT wildcards ('+' one level, '#' the
remaining levels). Adapters for brokers with other conventions translate at
their boundary so handlers always see '/'-separated topic names.

Handlers receive (topic, payload) with the payload exactly as received;
use trimPayload() to obtain the NUL-trimmed payload.

Property of Uncompromising Sensors LLC.
"""


# Imports
import logging, uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

# Local imports
from sdk.logging import getLogger


def trimPayload(payload: bytes | memoryview) -> bytes:
    """Payload bytes without trailing NUL terminators."""
    return bytes(payload).rstrip(b'\x00')


class SubscriptionHandle:
    """
    Lightweight subscription handle for local lifecycle control.

    Read-only fields:
        - topic: The subscribed topic filter
        - active: Whether this subscription is currently active
        - messagesSeen: Messages delivered to this handle's handler"""


    def __init__(self, topic: str, unsubscribeCallback: Callable):
        self._topic = topic
        self._active = True
        self._messagesSeen = 0
        self._unsubscribeCallback = unsubscribeCallback

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def active(self) -> bool:
        return self._active

    @property
    def messagesSeen(self) -> int:
        return self._messagesSeen

    def _incrementMessages(self):
        self._messagesSeen += 1

    async def unsubscribe(self):
        """Unsubscribe from this topic filter (local instance only)."""
        if self._active:
            self._active = False
            await self._unsubscribeCallback(self)


class TransportBase(ABC):
    """
    Abstract base class for transport adapters.

    Lifecycle States:
        - CLOSED: Not connected (initial and final)
        - READY: Transport is operational"""


    def __init__(self):

        # Setup logging
        self._logger = getLogger()

        # Setup state, attributes
        self._state = 'CLOSED'
        self._endpoint = None
        self._connectedAt = None
        self._instanceId = str(uuid.uuid4())[:8]
        self._subscriptions: Dict[str, SubscriptionHandle] = {}


    # ===== Core Abstract Methods (Must Implement) =====
    @abstractmethod
    async def connect(self, uri: str, **opts) -> None:
        pass

    @abstractmethod
    async def publish(self, topic: str, payload: bytes | memoryview, timeout: Optional[float] = None) -> None:
        pass


    @abstractmethod
    async def subscribe(self, topic: str, handler: Callable[[str, bytes], Any],
                        timeout: Optional[float] = None) -> SubscriptionHandle:
        pass


    @abstractmethod
    async def close(self, timeout: Optional[float] = None) -> None:
        pass


    # ===== Core Properties =====
    @property
    @abstractmethod
    def transportType(self) -> str:
        pass

    @property
    def state(self) -> str:
        return self._state


    @property
    def isConnected(self) -> bool:
        return self._state == 'READY'


    # ===== Optional Methods (Safe Base Defaults) =====
    def status(self) -> Dict[str, Any]:
        return {'state': self._state, 'endpoint': self._endpoint, 'sinceTs': self._connectedAt,
                'subs': len([h for h in self._subscriptions.values() if h.active])}


    def setLogger(self, logger) -> None:
        self._logger = logger


    # ===== Helper Methods =====
    def _requireReady(self):
        if self._state != 'READY':
            raise RuntimeError(f'{type(self).__name__} not connected')


    def _log(self, message: str, level: str = 'INFO', **fields):
        fields.setdefault('transport', self.transportType)
        fields.setdefault('endpoint', self._endpoint)
        fields.setdefault('instanceId', self._instanceId)
        logLevel = getattr(logging, level.upper(), logging.INFO)
        self._logger.log(logLevel, message, extra=fields)


    async def _dispatch(self, handle: SubscriptionHandle, handler: Callable, topic: str, payload: bytes):
        """Deliver one message; handler errors are logged, never raised into the client loop."""
        if not handle.active:
            return
        try:
            handle._incrementMessages()
            result = handler(topic, payload)
            if hasattr(result, '__await__'):
                await result
        except Exception as e:
            self._log(f'Handler error: {e!r}', level='ERROR', topic=topic, errorClass=type(e).__name__)


    async def _unsubscribeHandle(self, handle: SubscriptionHandle):
        if handle.topic in self._subscriptions:
            del self._subscriptions[handle.topic]

    # ===== Context Manager Support =====
    async def __aenter__(self):
        return self


    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
