"""
TransportFactory: Picks the broker adapter for a transport URI.

    mqtt://host[:port]  -> MqttTransport (paho-mqtt)
    nats://host[:port]  -> NatsTransport (nats-py)

createTransport() only instantiates; the caller connects with the same URI:

    transport = createTransport(uri, clientId='dvs-mapper')
    await transport.connect(uri)

Property of Uncompromising Sensors LLC.
"""


# Imports
from typing import List, Type
from urllib.parse import urlparse

# Local imports
from .transportBase import TransportBase
from .mqttTransport import MqttTransport
from .natsTransport import NatsTransport


_ADAPTERS = {
    'mqtt': MqttTransport,
    'nats': NatsTransport,
}


def supportedSchemes() -> List[str]:
    return sorted(_ADAPTERS)


def adapterFor(uri: str) -> Type[TransportBase]:
    """Adapter class for the URI scheme (case-insensitive)."""
    scheme = urlparse(uri).scheme.lower()
    if not scheme:
        raise ValueError(f"Transport URI has no scheme (expected {' or '.join(supportedSchemes())}): {uri}")
    try:
        return _ADAPTERS[scheme]
    except KeyError:
        raise ValueError(f"Unsupported transport scheme '{scheme}'. Supported: {', '.join(supportedSchemes())}") from None


def createTransport(uri: str, **opts) -> TransportBase:
    """Unconnected adapter for uri; opts go to the adapter constructor (MqttTransport takes clientId)."""
    return adapterFor(uri)(**opts)
