"""
Universal hierarchical logger with automatic detection.

Features:
- Auto-detects logger hierarchy from call stack (computed once, cached)
- Optional per-application rotating log file
- Structured field logging: log.info("Message", key=value)
- Service context fields (see context.py) on every record

Usage:
    from sdk.logging import getLogger

    # Class-level (compute once in __init__)
    class MapperService:
        def __init__(self):
            self.log = getLogger()  # 'dvsMapper.core.mapperService.MapperService'

        def handle(self, topic):
            self.log.info("Converted", topic=topic)

    # Module-level (compute once at import)
    log = getLogger()

Property of Uncompromising Sensors LLC.
"""

# Imports
import inspect, logging, logging.handlers, socket
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone as tz

# Local imports
from .context import ServiceContextFilter


# Global state
_hostname = socket.gethostname()
_configured = False
_fileHandlers = {}  # Singleton cache: logPath -> handler
_contextFilter = ServiceContextFilter()
_config = {
    'logDir': None,                 # None: console only
    'maxBytes': 10_000_000,         # 10 MB per log file before rotation
    'backupCount': 5,
    'console': True,
    'level': logging.INFO,
    'utc': False
}

# Record attributes that are not structured fields
_RESERVED = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'taskName', 'exc_info',
    'exc_text', 'stack_info', 'hostname', 'asctime'
}


def configureLogging(logDir: Optional[str] = None, maxBytes: int = 10_000_000,
                     backupCount: int = 5, console: bool = True, level: str = 'INFO', utc: bool = False):
    """
    Configure global logging settings (call once at app startup, before getLogger).

    Args:
        logDir: Directory for log files (default: None, console only)
        maxBytes: Maximum size per log file before rotation (default: 10MB)
        backupCount: Number of backup files to keep per app (default: 5)
        console: Also log to console (default: True)
        level: Minimum log level (default: 'INFO')
        utc: Use UTC timestamps (default: False, uses local time)
    """
    global _configured

    levelNo = logging.getLevelName(level.upper())
    if not isinstance(levelNo, int):
        raise ValueError(f"Unknown log level: {level}")

    _config.update({'logDir': logDir, 'maxBytes': maxBytes, 'backupCount': backupCount,
                    'console': console, 'level': levelNo, 'utc': utc})

    if logDir is not None:
        Path(logDir).mkdir(parents=True, exist_ok=True)
    _configured = True


def _autoDetectName() -> str:
    """Auto-detect logger name from call stack. Returns hierarchy like: 'dvsMapper.core.mapperService.MapperService'"""

    frame = inspect.currentframe()
    try:
        current = frame
        while current is not None:
            current = current.f_back
            if current is None:
                break

            moduleName = current.f_globals.get('__name__')
            if not moduleName:
                continue

            # Skip frames inside this package and the import machinery
            if moduleName.startswith('sdk.logging') or moduleName.startswith('importlib'):
                continue

            parts = moduleName.split('.')

            # Remove 'sdk' prefix if present (it's just a package wrapper)
            if parts and parts[0] == 'sdk':
                parts = parts[1:]

            # Class name if called from within a method
            className = None
            if 'self' in current.f_locals:
                className = current.f_locals['self'].__class__.__name__
            elif 'cls' in current.f_locals and isinstance(current.f_locals['cls'], type):
                className = current.f_locals['cls'].__name__

            hierarchy = '.'.join(parts) if parts else 'unknown'
            if className:
                hierarchy = f"{hierarchy}.{className}"
            return hierarchy

        return 'unknown'
    finally:
        del frame


class StructuredFormatter(logging.Formatter):
    """Formatter that includes hostname and structured fields.
    Format: timestamp - hostname - logger.name - level - message [field1=value1, field2=value2]"""

    def __init__(self, fmt=None, datefmt=None, utc=False):
        super().__init__(fmt, datefmt)
        self.utc = utc

    def formatTime(self, record, datefmt=None):
        if self.utc:
            ct = datetime.fromtimestamp(record.created, tz=tz.utc)
        else:
            ct = datetime.fromtimestamp(record.created)

        if datefmt:
            return ct.strftime(datefmt)
        return f"{ct.strftime('%Y-%m-%d %H:%M:%S')},{int(record.msecs):03d}"

    def format(self, record):
        record.hostname = _hostname

        structuredFields = [f"{key}={value}" for key, value in record.__dict__.items()
                            if key not in _RESERVED and not key.startswith('_')]

        # Append fields to a copy of the message, other handlers see the original
        originalMsg = record.msg
        if structuredFields:
            record.msg = f"{originalMsg} [{', '.join(structuredFields)}]"
        try:
            return super().format(record)
        finally:
            record.msg = originalMsg


def getLogger(name: Optional[str] = None, separateFile: bool = False) -> logging.Logger:
    """
    Get or create a logger with automatic hierarchy detection.

    Stack inspection happens once per getLogger() call; keep the returned
    logger on the instance or module.

    Args:
        name: Logger name (auto-detected from call stack if None)
        separateFile: Log file named after the full hierarchy instead of the app name

    Returns:
        logging.Logger whose debug/info/warning/error/critical accept structured **fields
    """
    if not _configured:
        configureLogging()

    if name is None:
        name = _autoDetectName()

    logger = logging.getLogger(name)
    logger.propagate = False

    if not getattr(logger, '_configuredBySdk', False):
        logger.setLevel(_config['level'])

        if _config['logDir'] is not None:
            appName = name if separateFile else name.split('.')[0]
            logPath = str(Path(_config['logDir']) / f"{appName}.log")

            if logPath not in _fileHandlers:
                fileHandler = logging.handlers.RotatingFileHandler(
                    logPath,
                    maxBytes=_config['maxBytes'],
                    backupCount=_config['backupCount'],
                    encoding='utf-8'
                )
                fileHandler.setFormatter(StructuredFormatter(
                    '%(asctime)s - %(hostname)s - %(name)s - %(levelname)s - %(message)s',
                    utc=_config['utc']
                ))
                fileHandler.addFilter(_contextFilter)
                _fileHandlers[logPath] = fileHandler

            logger.addHandler(_fileHandlers[logPath])

        if _config['console']:
            consoleHandler = logging.StreamHandler()
            consoleHandler.setFormatter(StructuredFormatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                utc=_config['utc']
            ))
            consoleHandler.addFilter(_contextFilter)
            logger.addHandler(consoleHandler)

        logger._configuredBySdk = True

    return _wrapLogger(logger)


def _wrapLogger(logger: logging.Logger) -> logging.Logger:
    """
    Add convenience methods that accept structured fields as **kwargs.

    This allows: log.info("Message", field1=value1)
    Instead of:  log.info("Message", extra={'field1': value1})
    """
    if getattr(logger, '_isWrapped', False):
        return logger

    def wrap(original):
        def method(msg, *args, **kwargs):
            excInfo = kwargs.pop('exc_info', False)
            if kwargs:
                original(msg, *args, extra=kwargs, exc_info=excInfo)
            else:
                original(msg, *args, exc_info=excInfo)
        return method

    logger.debug = wrap(logger.debug)
    logger.info = wrap(logger.info)
    logger.warning = wrap(logger.warning)
    logger.error = wrap(logger.error)
    logger.critical = wrap(logger.critical)
    logger._isWrapped = True

    return logger
