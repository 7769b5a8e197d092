"""Convenience accessors for the zakat engine inside an application context."""
from flask import current_app

from zakat_engine.services.cache import PriceCache
from zakat_engine.services.calc import ZakatCalculator
from zakat_engine.services.config import ZakatConfig
from zakat_engine.services.nisab import NisabService


def _state() -> dict:
    try:
        return current_app.extensions['zakat']
    except KeyError:
        raise RuntimeError('zakat_engine.init_app() has not been called for this app')


def get_config() -> ZakatConfig:
    return _state()['config']


def get_cache() -> PriceCache:
    return _state()['cache']


def get_nisab_service() -> NisabService:
    """Build a nisab service over the app's settings and price cache."""
    return NisabService(get_config(), get_cache())


def get_calculator() -> ZakatCalculator:
    """Build a fresh calculator for one calculation session."""
    nisab = get_nisab_service()
    return ZakatCalculator(nisab, nisab.config)
