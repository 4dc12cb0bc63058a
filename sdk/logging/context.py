"""
Logging Context

Service-level identity (serviceType, nodeId) added to every log record
written through sdk.logging handlers.
"""

import logging
from typing import Optional
from contextvars import ContextVar

# Context variables for service identity
_serviceType: ContextVar[Optional[str]] = ContextVar('serviceType', default=None)
_nodeId: ContextVar[Optional[str]] = ContextVar('nodeId', default=None)


class ServiceContextFilter(logging.Filter):
    """Handler filter that adds service context to log records"""

    def filter(self, record):
        serviceType = _serviceType.get()
        nodeId = _nodeId.get()

        if serviceType:
            record.serviceType = serviceType
        if nodeId:
            record.nodeId = nodeId

        return True


def setServiceContext(serviceType: str, nodeId: Optional[str] = None):
    """
    Set service-level context for logging

    Args:
        serviceType: Type of service ('dvsMapper')
        nodeId: Node identifier (optional, e.g. hostname or MQTT client id)
    """
    _serviceType.set(serviceType)
    if nodeId:
        _nodeId.set(nodeId)


def getServiceContext() -> dict:
    return {'serviceType': _serviceType.get(), 'nodeId': _nodeId.get()}


def clearServiceContext():
    _serviceType.set(None)
    _nodeId.set(None)
