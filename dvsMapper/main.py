"""
DVS Mapper entry point.

Connects to the broker, subscribes to DVS measurement topics and republishes
every message as a thin-edge JSON document until SIGINT/SIGTERM.

Usage:
    python -m dvsMapper [--config path/to/config.json] [--uri mqtt://host:1883] [--log-level DEBUG]
"""

import asyncio
import argparse
import signal
import socket
from typing import Optional, Sequence

from sdk.logging import getLogger, configureLogging, setServiceContext
from sdk.transport import createTransport, MqttTransport
from .config_loader import loadMapperConfig
from .core.converter import DvsConverter
from .core.mapperService import MapperService


def parseArgs(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='DVS Mapper - DVS telemetry to thin-edge JSON')
    parser.add_argument('--config', default=None, help='Path to JSON config file (default: built-in defaults)')
    parser.add_argument('--uri', default=None, help='Transport URI, overrides transport.uri')
    parser.add_argument('--log-level', dest='logLevel', default=None, help='Log level, overrides logging.level')
    return parser.parse_args(argv)


def applyOverrides(config: dict, args: argparse.Namespace) -> dict:
    if args.uri:
        config['transport']['uri'] = args.uri
    if args.logLevel:
        config['logging']['level'] = args.logLevel
    return config


async def runMapper(config: dict, stopEvent: asyncio.Event):
    """Run the mapper until stopEvent is set."""
    log = getLogger()
    transportConfig = config['transport']
    mapperConfig = config['mapper']

    uri = transportConfig['uri']
    transport = createTransport(uri)
    connectOpts = {}
    if isinstance(transport, MqttTransport) and transportConfig.get('clientId'):
        connectOpts['clientId'] = transportConfig['clientId']
    await transport.connect(uri, **connectOpts)

    service = MapperService(
        transport,
        DvsConverter(addTimestamp=mapperConfig.get('addTimestamp', True)),
        inputTopic=mapperConfig['inputTopic'],
        outputTopic=mapperConfig['outputTopic']
    )

    try:
        await service.start()
        log.info("Mapper running (Ctrl+C to stop)", uri=uri)
        await stopEvent.wait()
    finally:
        await service.stop()
        await transport.close()
        log.info("Mapper stopped", **service.stats())


def main(argv: Optional[Sequence[str]] = None):
    args = parseArgs(argv)

    # Load config before logging is configured from it
    config, version, usedDefaults = loadMapperConfig(args.config)
    config = applyOverrides(config, args)

    loggingConfig = config['logging']
    configureLogging(logDir=loggingConfig.get('logDir'), level=loggingConfig.get('level', 'INFO'),
                     console=loggingConfig.get('console', True), utc=loggingConfig.get('utc', True))
    setServiceContext('dvsMapper', nodeId=socket.gethostname())

    log = getLogger()
    log.info("DVS Mapper starting", configPath=args.config, configVersion=version, usedDefaults=usedDefaults)
    if args.config and usedDefaults:
        log.warning("Config file unusable, running on defaults", configPath=args.config)

    async def run():
        stopEvent = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stopEvent.set)
            except NotImplementedError:
                # Windows: KeyboardInterrupt still ends asyncio.run
                pass
        await runMapper(config, stopEvent)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        log.info("Shutdown signal received")


if __name__ == '__main__':
    main()
