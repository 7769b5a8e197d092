"""Pytest fixtures for zakat engine tests."""
from datetime import datetime, timezone

import pytest

from zakat_engine import create_app
from zakat_engine.services.cache import MemoryCache
from zakat_engine.services.calc import ZakatCalculator
from zakat_engine.services.config import load_config
from zakat_engine.services.nisab import NisabService
from zakat_engine.services.time_provider import TimeProvider


# Fixed instant for deterministic cache expiry
FROZEN_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

ZAKAT_ENV_VARS = [
    'ZAKAT_CONFIG_FILE',
    'ZAKAT_GOLD_PRICE',
    'ZAKAT_SILVER_PRICE',
    'ZAKAT_CACHE_ENABLED',
    'ZAKAT_CACHE_TTL',
    'ZAKAT_CACHE_BACKEND',
    'ZAKAT_PRECISION',
]


@pytest.fixture(autouse=True)
def clean_zakat_env(monkeypatch):
    """Keep ZAKAT_* variables from the shell out of the tests."""
    for name in ZAKAT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def frozen_time():
    """TimeProvider frozen at FROZEN_NOW."""
    return TimeProvider(frozen_at=FROZEN_NOW)


@pytest.fixture
def config():
    """Default settings: gold 100/g, silver 10/g."""
    return load_config()


@pytest.fixture
def cache(frozen_time):
    return MemoryCache(time_provider=frozen_time)


@pytest.fixture
def nisab_service(config, cache):
    return NisabService(config, cache)


@pytest.fixture
def calculator(nisab_service):
    return ZakatCalculator(nisab_service)


@pytest.fixture
def make_calculator(cache):
    """Build a calculator over custom settings sharing the test cache."""
    def _make(**overrides):
        settings = load_config(overrides=overrides)
        return ZakatCalculator(NisabService(settings, cache))
    return _make


@pytest.fixture
def app(tmp_path):
    """Create application for testing.

    Yields:
        Flask application with a file price cache in a temp DATA_DIR.
    """
    app = create_app({
        'TESTING': True,
        'DATA_DIR': str(tmp_path),
        'ZAKAT': {'cache': {'backend': 'file'}},
    })
    yield app


@pytest.fixture
def runner(app):
    return app.test_cli_runner()
