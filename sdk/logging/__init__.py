"""
SDK Logging - Universal hierarchical logger with automatic detection.

API:
    from sdk.logging import getLogger

    # Class-level (auto-detect once in __init__)
    class MapperService:
        def __init__(self):
            self.log = getLogger()  # Auto: 'dvsMapper.core.mapperService.MapperService'

        def start(self):
            self.log.info("Subscribing", topic=self.inputTopic)

    # Global configuration (optional, once at app startup)
    from sdk.logging import configureLogging, setServiceContext
    configureLogging(logDir='../logs', level='INFO')
    setServiceContext('dvsMapper', nodeId='edge-01')
"""

from .logger import getLogger, configureLogging, StructuredFormatter
from .context import (
    setServiceContext,
    getServiceContext,
    clearServiceContext
)

__all__ = [
    'getLogger',
    'configureLogging',
    'StructuredFormatter',
    'setServiceContext',
    'getServiceContext',
    'clearServiceContext'
]
