"""Tests for Flask app factory behavior."""
import json

import pytest

from zakat_engine import create_app
from zakat_engine.exceptions import CacheError, ConfigError
from zakat_engine.services.cache import FileCache, MemoryCache


def test_create_app_registers_zakat_extension():
    """create_app should expose settings and cache under app.extensions."""
    app = create_app({'TESTING': True})

    state = app.extensions['zakat']
    assert state['config'].get('nisab.gold') == 85
    assert isinstance(state['cache'], MemoryCache)


def test_create_app_uses_file_cache_in_data_dir(tmp_path):
    """The file backend keeps its JSON document in DATA_DIR."""
    app = create_app({
        'TESTING': True,
        'DATA_DIR': str(tmp_path),
        'ZAKAT': {'cache': {'backend': 'file'}},
    })

    cache = app.extensions['zakat']['cache']
    assert isinstance(cache, FileCache)
    assert cache.data_dir == str(tmp_path)


def test_create_app_merges_zakat_overrides():
    """Nested ZAKAT settings override only the keys they name."""
    app = create_app({'TESTING': True, 'ZAKAT': {'nisab': {'gold': 87.48}}})

    settings = app.extensions['zakat']['config']
    assert settings.get('nisab.gold') == 87.48
    assert settings.get('nisab.silver') == 595


def test_create_app_reads_config_file(tmp_path):
    """ZAKAT_CONFIG_FILE points at a JSON settings document."""
    path = tmp_path / 'zakat.json'
    path.write_text(json.dumps({'default_prices': {'gold': 65.0}}))

    app = create_app({'TESTING': True, 'ZAKAT_CONFIG_FILE': str(path)})

    assert app.extensions['zakat']['config'].get('default_prices.gold') == 65.0


def test_create_app_missing_config_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        create_app({'TESTING': True, 'ZAKAT_CONFIG_FILE': str(tmp_path / 'missing.json')})


def test_create_app_unknown_cache_backend_raises():
    with pytest.raises(CacheError):
        create_app({'TESTING': True, 'ZAKAT': {'cache': {'backend': 'redis'}}})


def test_create_app_registers_cli_group():
    app = create_app({'TESTING': True})
    assert 'zakat' in app.cli.commands
