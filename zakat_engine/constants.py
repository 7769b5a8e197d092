"""Shared constants for zakat calculation."""

# Zakat rate (2.5%) on cash, metals and business assets
ZAKAT_RATE = 0.025

# Nisab thresholds (minimum wealth for zakat obligation)
NISAB_GOLD_GRAMS = 85
NISAB_SILVER_GRAMS = 595

# Agricultural nisab is five wasqs of produce
WASQS_PER_AGRICULTURAL_NISAB = 5
DEFAULT_WASQ_WEIGHT_KG = 60

IRRIGATED_RATE = 0.05
NON_IRRIGATED_RATE = 0.1

# Valid gold karats
SUPPORTED_KARATS = [24, 22, 21, 18, 14, 12, 10]
PURE_GOLD_KARAT = 24

CALCULATION_METHODS = ['hanafi', 'shafi', 'maliki', 'hanbali']
DEFAULT_CALCULATION_METHOD = 'hanafi'

# Which metal threshold applies to cash and business assets
NISAB_BASES = ('gold', 'silver')
DEFAULT_CASH_NISAB_BASIS = 'gold'

# Weight units accepted by the setters
GRAMS_PER_TROY_OUNCE = 31.1034768
WEIGHT_UNITS = {
    'gram': 1.0,
    'ounce': GRAMS_PER_TROY_OUNCE,
}
DEFAULT_WEIGHT_UNIT = 'gram'

# Cache keys and defaults for metal prices
GOLD_PRICE_CACHE_KEY = 'zakat.gold_price'
SILVER_PRICE_CACHE_KEY = 'zakat.silver_price'
DEFAULT_CACHE_TTL = 3600

DEFAULT_GOLD_PRICE = 100
DEFAULT_SILVER_PRICE = 10

DEFAULT_PRECISION = 2

# Where a price currently held by the nisab service came from
PRICE_SOURCES = {
    'cache': 'Read from the price cache',
    'config': 'Configured default price',
    'manual': 'Set explicitly',
    'config-fallback': 'Configured default used because the cache failed',
}
