"""
DVS Mapper Service

Subscribes to DVS measurement topics, converts every message to a thin-edge
JSON document and republishes it.

    dvs/+/+/+  --DvsConverter-->  tedge/measurements

Failure policy:
- A message that cannot be decoded or serialized is logged and counted,
  then dropped; the handler never raises into the transport
- Publish failures are logged and counted the same way
- No retry or dead-lettering at this layer
"""

from typing import Optional

from sdk.jsonWriter import JsonWriterError
from sdk.logging import getLogger
from sdk.transport import trimPayload
from .converter import DvsConverter
from .dvs import DvsError
from .measurement import MeasurementStreamError


DEFAULT_INPUT_TOPIC = "dvs/+/+/+"
DEFAULT_OUTPUT_TOPIC = "tedge/measurements"


class MapperError(Exception):
    """Mapper service lifecycle error"""
    pass


class MapperService:
    """Transport-driven DVS to thin-edge JSON mapper"""

    def __init__(self, transport, converter: Optional[DvsConverter] = None,
                 inputTopic: str = DEFAULT_INPUT_TOPIC, outputTopic: str = DEFAULT_OUTPUT_TOPIC):
        """
        Args:
            transport: sdk.transport instance (already connected)
            converter: DvsConverter (default: adds UTC timestamps)
            inputTopic: Topic filter to subscribe to
            outputTopic: Topic converted documents are published on
        """
        self.transport = transport
        self.converter = converter or DvsConverter()
        self.inputTopic = inputTopic
        self.outputTopic = outputTopic
        self.subscriptions = []
        self._running = False
        self.log = getLogger()
        self.receivedCount = 0
        self.convertedCount = 0
        self.errorCount = 0

    async def start(self):
        if self._running:
            raise MapperError("MapperService already running")

        subscription = await self.transport.subscribe(self.inputTopic, self.handleMessage)
        self.subscriptions.append(subscription)
        self._running = True

        self.log.info("Mapper subscription active", inputTopic=self.inputTopic, outputTopic=self.outputTopic)

    async def stop(self):
        if not self._running:
            return

        for subscription in self.subscriptions:
            await subscription.unsubscribe()
        self.subscriptions.clear()
        self._running = False

        self.log.info("Mapper stopped", received=self.receivedCount, converted=self.convertedCount, errors=self.errorCount)

    async def handleMessage(self, topic: str, payload: bytes):
        """Convert and republish one transport message."""
        self.receivedCount += 1

        try:
            document = self.converter.convert(topic, trimPayload(payload))
        except (DvsError, MeasurementStreamError, JsonWriterError) as e:
            self.errorCount += 1
            self.log.warning(f"Dropped message: {e}", topic=topic, errorClass=type(e).__name__)
            return

        try:
            await self.transport.publish(self.outputTopic, document)
        except Exception as e:
            self.errorCount += 1
            self.log.error(f"Publish failed: {e!r}", topic=self.outputTopic, errorClass=type(e).__name__)
            return

        self.convertedCount += 1
        if self.convertedCount % 1000 == 0:
            self.log.info(f"Converted {self.convertedCount} messages total")

    def stats(self) -> dict:
        return {
            'running': self._running,
            'received': self.receivedCount,
            'converted': self.convertedCount,
            'errors': self.errorCount,
            'inputTopic': self.inputTopic,
            'outputTopic': self.outputTopic
        }
