"""Tests for cache service."""
import json
import os
from unittest.mock import patch

import pytest

from zakat_engine.exceptions import CacheError
from zakat_engine.services import cache
from zakat_engine.services.cache import FileCache, MemoryCache, build_cache


@pytest.fixture
def file_cache(tmp_path, frozen_time):
    return FileCache(str(tmp_path), time_provider=frozen_time)


@pytest.fixture(params=['memory', 'file'])
def any_cache(request, tmp_path, frozen_time):
    """Both backends, for behaviour they must share."""
    if request.param == 'memory':
        return MemoryCache(time_provider=frozen_time)
    return FileCache(str(tmp_path), time_provider=frozen_time)


class TestSharedBehaviour:
    """Get/put/remember semantics common to both backends."""

    def test_get_missing_returns_default(self, any_cache):
        """Missing keys return the default."""
        assert any_cache.get('zakat.gold_price') is None
        assert any_cache.get('zakat.gold_price', 42) == 42

    def test_put_and_get(self, any_cache):
        """put stores a value that get returns."""
        any_cache.put('zakat.gold_price', 65.5, 3600)
        assert any_cache.get('zakat.gold_price') == 65.5

    def test_entry_expires_after_ttl(self, any_cache, frozen_time):
        """Entries are gone once the TTL has elapsed."""
        any_cache.put('zakat.gold_price', 65.5, 3600)
        frozen_time.advance(seconds=3599)
        assert any_cache.get('zakat.gold_price') == 65.5
        frozen_time.advance(seconds=1)
        assert any_cache.get('zakat.gold_price') is None

    def test_ttl_none_never_expires(self, any_cache, frozen_time):
        any_cache.put('zakat.gold_price', 65.5, None)
        frozen_time.advance(seconds=10 ** 8)
        assert any_cache.get('zakat.gold_price') == 65.5

    def test_zero_ttl_removes_key(self, any_cache):
        any_cache.put('zakat.gold_price', 65.5, 3600)
        any_cache.put('zakat.gold_price', 70.0, 0)
        assert any_cache.get('zakat.gold_price') is None

    def test_remember_computes_on_miss(self, any_cache):
        """remember stores the computed value on a miss."""
        calls = []

        def compute():
            calls.append(1)
            return 100.0

        assert any_cache.remember('zakat.gold_price', 3600, compute) == 100.0
        assert any_cache.remember('zakat.gold_price', 3600, compute) == 100.0
        assert len(calls) == 1

    def test_remember_returns_cached_value(self, any_cache):
        """remember does not call compute on a hit."""
        any_cache.put('zakat.gold_price', 65.5, 3600)
        assert any_cache.remember('zakat.gold_price', 3600, lambda: pytest.fail('computed')) == 65.5

    def test_remember_recomputes_after_expiry(self, any_cache, frozen_time):
        any_cache.remember('zakat.gold_price', 60, lambda: 1.0)
        frozen_time.advance(seconds=61)
        assert any_cache.remember('zakat.gold_price', 60, lambda: 2.0) == 2.0

    def test_zero_is_a_cached_value(self, any_cache):
        """A cached 0.0 is a hit, not a miss."""
        any_cache.put('zakat.silver_price', 0.0, 3600)
        assert any_cache.remember('zakat.silver_price', 3600, lambda: 10.0) == 0.0

    def test_forget_and_clear(self, any_cache):
        any_cache.put('zakat.gold_price', 65.5, 3600)
        any_cache.put('zakat.silver_price', 0.8, 3600)
        any_cache.forget('zakat.gold_price')
        assert not any_cache.has('zakat.gold_price')
        assert any_cache.has('zakat.silver_price')
        any_cache.clear()
        assert not any_cache.has('zakat.silver_price')

    def test_forget_missing_key(self, any_cache):
        """forget does not error when the key does not exist."""
        any_cache.forget('zakat.gold_price')  # Should not raise


class TestFileCache:
    """Tests specific to the JSON file backend."""

    def test_path(self, file_cache, tmp_path):
        """path joins DATA_DIR and the cache file name."""
        assert file_cache.path == os.path.join(str(tmp_path), cache.CACHE_FILE)

    def test_persists_across_instances(self, file_cache, tmp_path, frozen_time):
        file_cache.put('zakat.gold_price', 65.5, 3600)
        reopened = FileCache(str(tmp_path), time_provider=frozen_time)
        assert reopened.get('zakat.gold_price') == 65.5

    def test_corrupt_file_reads_as_empty(self, file_cache):
        """An unreadable document is treated as a cache miss."""
        with open(file_cache.path, 'w') as f:
            f.write('{not json')
        assert file_cache.get('zakat.gold_price') is None

    def test_put_replaces_corrupt_file(self, file_cache):
        with open(file_cache.path, 'w') as f:
            f.write('[]')
        file_cache.put('zakat.gold_price', 65.5, 3600)
        with open(file_cache.path) as f:
            data = json.load(f)
        assert data['zakat.gold_price']['value'] == 65.5

    def test_write_failure_raises_cache_error(self, file_cache):
        """Errors while writing surface as CacheError and leave no temp file."""
        with patch('zakat_engine.services.cache.os.replace', side_effect=OSError('disk full')):
            with pytest.raises(CacheError):
                file_cache.put('zakat.gold_price', 65.5, 3600)
        assert not [name for name in os.listdir(file_cache.data_dir) if name.endswith('.tmp')]

    def test_clear_removes_file(self, file_cache):
        file_cache.put('zakat.gold_price', 65.5, 3600)
        assert os.path.exists(file_cache.path)
        file_cache.clear()
        assert not os.path.exists(file_cache.path)

    def test_clear_no_file(self, file_cache):
        """clear does not error when the file does not exist."""
        file_cache.clear()  # Should not raise


class TestBuildCache:

    def test_memory_backend(self):
        assert isinstance(build_cache('memory'), MemoryCache)

    def test_file_backend(self, tmp_path):
        built = build_cache('file', data_dir=str(tmp_path))
        assert isinstance(built, FileCache)

    def test_file_backend_requires_data_dir(self):
        with pytest.raises(CacheError):
            build_cache('file')

    def test_unknown_backend(self):
        with pytest.raises(CacheError):
            build_cache('memcached')
