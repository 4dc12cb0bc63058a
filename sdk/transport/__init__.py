"""sdk.transport - Publish/subscribe transport layer.

Public API:
    - TransportBase: Abstract base class for transport adapters
    - SubscriptionHandle: Lightweight subscription handle
    - trimPayload: Payload bytes without trailing NUL terminators
    - createTransport: Adapter for a mqtt:// or nats:// URI (not yet connected)
    - adapterFor / supportedSchemes: URI scheme lookup
    - MqttTransport: MQTT transport implementation (paho-mqtt)
    - NatsTransport: NATS transport implementation (nats-py, imported on connect)

Usage:
    from sdk.transport import createTransport

    transport = createTransport('mqtt://localhost:1883')
    await transport.connect('mqtt://localhost:1883')

    def handler(topic, payload):
        print(f"Received on {topic}: {payload}")

    handle = await transport.subscribe('dvs/+/+/+', handler)
    await transport.publish('tedge/measurements', b'{"temperature":25.5}')

    await handle.unsubscribe()
    await transport.close()

Property of Uncompromising Sensors LLC.
"""

from .transportBase import TransportBase, SubscriptionHandle, trimPayload
from .mqttTransport import MqttTransport
from .natsTransport import NatsTransport
from .transportFactory import createTransport, adapterFor, supportedSchemes

__all__ = [
    'TransportBase',
    'SubscriptionHandle',
    'trimPayload',
    'createTransport',
    'adapterFor',
    'supportedSchemes',
    'MqttTransport',
    'NatsTransport'
]
