"""Default zakat settings, merged with user configuration at load time."""
from zakat_engine.constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_CALCULATION_METHOD,
    DEFAULT_CASH_NISAB_BASIS,
    DEFAULT_GOLD_PRICE,
    DEFAULT_PRECISION,
    DEFAULT_SILVER_PRICE,
    DEFAULT_WASQ_WEIGHT_KG,
    DEFAULT_WEIGHT_UNIT,
    IRRIGATED_RATE,
    NISAB_GOLD_GRAMS,
    NISAB_SILVER_GRAMS,
    NON_IRRIGATED_RATE,
    SUPPORTED_KARATS,
)

# Crops with a listed wasq weight. Anything else uses the default.
WASQ_CROPS = [
    'wheat', 'barley', 'dates', 'raisins', 'rice', 'corn', 'millet',
    'beans', 'lentils', 'chickpeas', 'peas', 'cotton', 'flax', 'sesame',
    'olives', 'grapes', 'pomegranates', 'figs', 'almonds', 'pistachios',
    'walnuts', 'hazelnuts', 'peanuts', 'sunflower', 'safflower', 'mustard',
    'fenugreek', 'cumin', 'coriander', 'fennel', 'anise', 'caraway',
    'cardamom', 'cloves', 'cinnamon', 'ginger', 'turmeric', 'black_pepper',
    'white_pepper', 'red_pepper', 'paprika', 'chili', 'nutmeg',
]


def _wasq_weights() -> dict:
    weights = {'default': DEFAULT_WASQ_WEIGHT_KG}
    weights.update({crop: DEFAULT_WASQ_WEIGHT_KG for crop in WASQ_CROPS})
    return weights


DEFAULT_SETTINGS = {
    'default_prices': {
        'gold': DEFAULT_GOLD_PRICE,
        'silver': DEFAULT_SILVER_PRICE,
    },
    'nisab': {
        'gold': NISAB_GOLD_GRAMS,
        'silver': NISAB_SILVER_GRAMS,
        'cash_basis': DEFAULT_CASH_NISAB_BASIS,
    },
    'currency': {
        'code': 'SAR',
        'symbol': 'SAR',
        'position': 'before',  # 'before' or 'after'
    },
    'weight_unit': DEFAULT_WEIGHT_UNIT,
    'precision': DEFAULT_PRECISION,
    'supported_karats': list(SUPPORTED_KARATS),
    'cache': {
        'enabled': True,
        'ttl': DEFAULT_CACHE_TTL,
        'backend': 'memory',  # 'memory' or 'file'
    },
    'calculation_methods': {
        'default': DEFAULT_CALCULATION_METHOD,
    },
    # Business asset labels; set one to False to leave it out of the total
    'business': {
        'inventory': True,
        'receivables': True,
        'cash_at_bank': True,
        'cash_in_hand': True,
    },
    'agricultural': {
        'irrigated_rate': IRRIGATED_RATE,
        'non_irrigated_rate': NON_IRRIGATED_RATE,
        'wasq_weights': _wasq_weights(),
    },
}
