"""Load the mapper JSON config, merged over the built-in defaults."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional, Tuple

import orjson

from .config_defaults import DEFAULT_MAPPER_CONFIG

MapperConfigResult = Tuple[dict, str, bool]


def mergeConfig(base: dict, override: dict) -> dict:
    """Deep-merge override into a copy of base (nested dicts merged, everything else replaced)."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = mergeConfig(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validateMapperConfig(config: dict) -> None:
    if not isinstance(config, dict):
        raise ValueError('mapper config is not a JSON object')

    transport = config.get('transport')
    if not isinstance(transport, dict):
        raise ValueError("Missing 'transport' section")
    if not isinstance(transport.get('uri'), str) or not transport['uri']:
        raise ValueError("Missing or invalid 'transport.uri'")

    mapper = config.get('mapper')
    if not isinstance(mapper, dict):
        raise ValueError("Missing 'mapper' section")
    for key in ('inputTopic', 'outputTopic'):
        if not isinstance(mapper.get(key), str) or not mapper[key]:
            raise ValueError(f"Missing or invalid 'mapper.{key}'")


def loadMapperConfig(path: Optional[str | Path], log: Optional[object] = None) -> MapperConfigResult:
    """
    Load a mapper config file, falling back to the defaults on any error.

    Returns:
        (config, configVersion, usedDefaults)
    """
    if path is None:
        return copy.deepcopy(DEFAULT_MAPPER_CONFIG), DEFAULT_MAPPER_CONFIG['configVersion'], True

    cfgPath = Path(path)
    try:
        loaded = orjson.loads(cfgPath.read_bytes())
        if not isinstance(loaded, dict):
            raise ValueError('mapper config is not a JSON object')
        config = mergeConfig(DEFAULT_MAPPER_CONFIG, loaded)
        validateMapperConfig(config)
        version = str(config.get('configVersion', '1.0'))
        if log:
            log.info('Loaded mapper config', event='mapperConfigLoad', configPath=str(cfgPath), configVersion=version)
        return config, version, False
    except (OSError, ValueError) as exc:
        # orjson.JSONDecodeError is a ValueError
        if log:
            log.error('Failed to load mapper config', event='mapperConfigLoadError', configPath=str(cfgPath),
                      errorClass=type(exc).__name__, errorMsg=str(exc))

    fallback = copy.deepcopy(DEFAULT_MAPPER_CONFIG)
    version = fallback['configVersion']
    if log:
        log.warning('Loaded mapper config defaults', event='mapperConfigBackupLoad', configVersion=version)
    return fallback, version, True
