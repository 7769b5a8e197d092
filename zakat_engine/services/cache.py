"""Time-bounded key/value caches for metal prices.

Two backends share the same interface: an in-process dictionary for a single
worker, and a JSON file in DATA_DIR (written atomically) that survives
restarts and can be shared by CLI commands and the application.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from zakat_engine.exceptions import CacheError
from zakat_engine.services.time_provider import TimeProvider

logger = logging.getLogger('zakat_engine.cache')

CACHE_FILE = 'price_cache.json'


class PriceCache(ABC):
    """Key/value store whose entries expire after a TTL in seconds."""

    def __init__(self, time_provider: Optional[TimeProvider] = None):
        self._time_provider = time_provider

    @property
    def time_provider(self) -> TimeProvider:
        return self._time_provider or TimeProvider.get_default()

    def _expires_at(self, ttl: Optional[int]) -> Optional[str]:
        if ttl is None:
            return None
        return (self.time_provider.now() + timedelta(seconds=ttl)).isoformat()

    def _is_fresh(self, entry: dict) -> bool:
        expires_at = entry.get('expires_at')
        if expires_at is None:
            return True
        try:
            return self.time_provider.now() < datetime.fromisoformat(expires_at)
        except (ValueError, TypeError):
            return False

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or default if missing or expired."""

    @abstractmethod
    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value. A ttl of None never expires; ttl <= 0 removes the key."""

    @abstractmethod
    def forget(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def remember(self, key: str, ttl: Optional[int], compute: Callable[[], Any]) -> Any:
        """Return the cached value, or compute, store and return it."""
        value = self.get(key)
        if value is not None:
            return value
        value = compute()
        self.put(key, value, ttl)
        return value


class MemoryCache(PriceCache):
    """Cache held in a dictionary for the lifetime of the process."""

    def __init__(self, time_provider: Optional[TimeProvider] = None):
        super().__init__(time_provider)
        self._entries: dict[str, dict] = {}

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if not self._is_fresh(entry):
            del self._entries[key]
            return default
        return entry['value']

    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        self._entries[key] = {'value': value, 'expires_at': self._expires_at(ttl)}

    def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class FileCache(PriceCache):
    """Cache persisted as a JSON document with atomic writes."""

    def __init__(self, data_dir: str, time_provider: Optional[TimeProvider] = None,
                 filename: str = CACHE_FILE):
        super().__init__(time_provider)
        self.data_dir = data_dir
        self.filename = filename

    @property
    def path(self) -> str:
        return os.path.join(self.data_dir, self.filename)

    def _read(self) -> dict:
        """Read all entries, treating a missing or corrupt file as empty."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable price cache {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _write(self, data: dict) -> None:
        """Atomic write: temp file then rename."""
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.data_dir, suffix='.tmp')
        except OSError as e:
            raise CacheError(f"Cannot write price cache in {self.data_dir}: {e}") from e
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise CacheError(f"Cannot write price cache {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._read().get(key)
        if not isinstance(entry, dict) or not self._is_fresh(entry):
            return default
        return entry.get('value', default)

    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        data = self._read()
        if ttl is not None and ttl <= 0:
            data.pop(key, None)
        else:
            data[key] = {'value': value, 'expires_at': self._expires_at(ttl)}
        self._write(data)

    def forget(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.unlink(self.path)


def build_cache(backend: str, data_dir: Optional[str] = None,
                time_provider: Optional[TimeProvider] = None) -> PriceCache:
    """Create the cache backend named in configuration."""
    if backend == 'file':
        if not data_dir:
            raise CacheError('The file cache backend needs a DATA_DIR')
        return FileCache(data_dir, time_provider=time_provider)
    if backend == 'memory':
        return MemoryCache(time_provider=time_provider)
    raise CacheError(f"Unknown cache backend: {backend}")
