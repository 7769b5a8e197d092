"""Configuration store for zakat settings.

Settings are layered: built-in defaults, then an optional JSON file, then
environment variables, then explicit overrides passed by the caller.
Lookups use dotted key paths such as ``nisab.gold``.
"""
import copy
import json
import logging
import os
from typing import Any, Optional

from zakat_engine.data.defaults import DEFAULT_SETTINGS
from zakat_engine.exceptions import ConfigError

logger = logging.getLogger('zakat_engine.config')

_MISSING = object()


class ZakatConfig:
    """Read-only view over a nested settings dictionary."""

    def __init__(self, settings: Optional[dict] = None):
        self._settings = copy.deepcopy(settings) if settings is not None else copy.deepcopy(DEFAULT_SETTINGS)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key path, returning default if any part is absent."""
        node: Any = self._settings
        for part in key.split('.'):
            if not isinstance(node, dict):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def as_dict(self) -> dict:
        return copy.deepcopy(self._settings)

    def __repr__(self) -> str:
        return f"ZakatConfig({self._settings!r})"


def deep_merge(base: dict, override: dict) -> dict:
    """Return a copy of base with override merged in, recursing into dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _env_flag(value: str) -> bool:
    return value.lower() in ('1', 'true', 'yes')


def get_config_file() -> str | None:
    """Get the JSON settings file path if configured.

    Controlled by ZAKAT_CONFIG_FILE env var.
    """
    return os.environ.get('ZAKAT_CONFIG_FILE')


def read_config_file(path: str) -> dict:
    """Read a JSON settings file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def get_env_overrides() -> dict:
    """Collect settings overridden by ZAKAT_* environment variables."""
    overrides: dict = {}
    env = os.environ

    try:
        if 'ZAKAT_GOLD_PRICE' in env:
            overrides.setdefault('default_prices', {})['gold'] = float(env['ZAKAT_GOLD_PRICE'])
        if 'ZAKAT_SILVER_PRICE' in env:
            overrides.setdefault('default_prices', {})['silver'] = float(env['ZAKAT_SILVER_PRICE'])
        if 'ZAKAT_CACHE_TTL' in env:
            overrides.setdefault('cache', {})['ttl'] = int(env['ZAKAT_CACHE_TTL'])
        if 'ZAKAT_PRECISION' in env:
            overrides['precision'] = int(env['ZAKAT_PRECISION'])
    except ValueError as e:
        raise ConfigError(f"Invalid ZAKAT_* environment value: {e}") from e

    if 'ZAKAT_CACHE_ENABLED' in env:
        overrides.setdefault('cache', {})['enabled'] = _env_flag(env['ZAKAT_CACHE_ENABLED'])
    if 'ZAKAT_CACHE_BACKEND' in env:
        overrides.setdefault('cache', {})['backend'] = env['ZAKAT_CACHE_BACKEND'].lower()

    return overrides


def load_config(path: Optional[str] = None, overrides: Optional[dict] = None) -> ZakatConfig:
    """Build a ZakatConfig from defaults, file, environment and overrides.

    Args:
        path: JSON settings file. Falls back to ZAKAT_CONFIG_FILE when None.
        overrides: Nested settings applied last.

    Returns:
        The merged configuration.
    """
    settings = DEFAULT_SETTINGS
    path = path or get_config_file()
    if path:
        settings = deep_merge(settings, read_config_file(path))
        logger.info(f"Loaded zakat settings from {path}")

    env_overrides = get_env_overrides()
    if env_overrides:
        settings = deep_merge(settings, env_overrides)

    if overrides:
        settings = deep_merge(settings, overrides)

    return ZakatConfig(settings)
