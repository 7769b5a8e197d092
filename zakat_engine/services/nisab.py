"""Metal prices and nisab thresholds.

The NisabService owns the current gold and silver prices per gram and turns
them, together with configuration, into the thresholds the calculator checks
each asset category against. Prices are cached with a TTL so a price set by
one session (or by the CLI) is picked up by the next.
"""
import logging

from zakat_engine.constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_GOLD_PRICE,
    DEFAULT_SILVER_PRICE,
    DEFAULT_WASQ_WEIGHT_KG,
    GOLD_PRICE_CACHE_KEY,
    IRRIGATED_RATE,
    NISAB_BASES,
    NISAB_GOLD_GRAMS,
    NISAB_SILVER_GRAMS,
    NON_IRRIGATED_RATE,
    SILVER_PRICE_CACHE_KEY,
    WASQS_PER_AGRICULTURAL_NISAB,
)
from zakat_engine.exceptions import CacheError, InvalidInput
from zakat_engine.services.cache import PriceCache
from zakat_engine.services.config import ZakatConfig
from zakat_engine.services.validation import to_non_negative

logger = logging.getLogger('zakat_engine.nisab')

PRICE_CACHE_KEYS = {
    'gold': GOLD_PRICE_CACHE_KEY,
    'silver': SILVER_PRICE_CACHE_KEY,
}

FALLBACK_PRICES = {
    'gold': DEFAULT_GOLD_PRICE,
    'silver': DEFAULT_SILVER_PRICE,
}


class NisabService:
    """Source of current metal prices, nisab values and agricultural rates."""

    def __init__(self, config: ZakatConfig, cache: PriceCache):
        self.config = config
        self.cache = cache
        self._prices = {'gold': 0.0, 'silver': 0.0}
        self.price_sources = {'gold': None, 'silver': None}
        self.load_default_prices()

    @property
    def cache_ttl(self) -> int:
        return int(self.config.get('cache.ttl', DEFAULT_CACHE_TTL))

    @property
    def cache_enabled(self) -> bool:
        return bool(self.config.get('cache.enabled', True))

    # Prices

    def set_gold_price(self, price: float) -> 'NisabService':
        """Set the gold price per gram and refresh its cache entry."""
        return self._set_price('gold', price)

    def set_silver_price(self, price: float) -> 'NisabService':
        """Set the silver price per gram and refresh its cache entry."""
        return self._set_price('silver', price)

    def get_gold_price(self) -> float:
        return self._prices['gold']

    def get_silver_price(self) -> float:
        return self._prices['silver']

    def _set_price(self, metal: str, price) -> 'NisabService':
        price = to_non_negative(price, f'{metal} price')
        self._prices[metal] = price
        self.price_sources[metal] = 'manual'
        try:
            self.cache.put(PRICE_CACHE_KEYS[metal], price, self.cache_ttl)
        except CacheError as e:
            logger.warning(f"{metal.title()} price {price} kept for this session only, cache write failed: {e}")
        logger.info(f"{metal.title()} price set to {price} per gram")
        return self

    def _default_price(self, metal: str) -> float:
        price = self.config.get(f'default_prices.{metal}', FALLBACK_PRICES[metal])
        return to_non_negative(price, f'default_prices.{metal}')

    def _remember_price(self, metal: str) -> tuple[float, str]:
        """Return (price, source) from the cache, computing the default on a miss."""
        computed = []

        def compute():
            computed.append(True)
            return self._default_price(metal)

        try:
            value = self.cache.remember(PRICE_CACHE_KEYS[metal], self.cache_ttl, compute)
        except CacheError as e:
            logger.warning(f"Price cache unavailable, using configured {metal} price: {e}")
            return self._default_price(metal), 'config-fallback'

        if value is None:
            return self._default_price(metal), 'config'
        try:
            price = to_non_negative(value, f'cached {metal} price')
        except InvalidInput as e:
            logger.warning(f"Ignoring cached {metal} price {value!r}: {e}")
            return self._default_price(metal), 'config-fallback'
        return price, 'config' if computed else 'cache'

    def load_default_prices(self) -> None:
        """Load prices from the cache, or from configuration when it is off."""
        for metal in ('gold', 'silver'):
            if self.cache_enabled:
                price, source = self._remember_price(metal)
            else:
                price, source = self._default_price(metal), 'config'
            self._prices[metal] = price
            self.price_sources[metal] = source
            logger.debug(f"Loaded {metal} price {price} from {source}")

    def get_prices(self) -> dict:
        return {
            'gold_per_gram': self.get_gold_price(),
            'silver_per_gram': self.get_silver_price(),
            'sources': dict(self.price_sources),
        }

    # Nisab thresholds

    def get_gold_nisab_weight(self) -> float:
        return float(self.config.get('nisab.gold', NISAB_GOLD_GRAMS))

    def get_silver_nisab_weight(self) -> float:
        return float(self.config.get('nisab.silver', NISAB_SILVER_GRAMS))

    def get_gold_nisab_value(self) -> float:
        """Nisab in money: 85 g of gold at the current price."""
        return self.get_gold_nisab_weight() * self.get_gold_price()

    def get_silver_nisab_value(self) -> float:
        """Nisab in money: 595 g of silver at the current price."""
        return self.get_silver_nisab_weight() * self.get_silver_price()

    def get_cash_nisab_value(self) -> float:
        """Classical cash nisab, pegged to silver."""
        return self.get_silver_nisab_value()

    def get_nisab_value(self, basis: str) -> float:
        if basis not in NISAB_BASES:
            raise InvalidInput(f"Unknown nisab basis: {basis}", field='nisab_basis')
        if basis == 'silver':
            return self.get_silver_nisab_value()
        return self.get_gold_nisab_value()

    # Agricultural produce

    def get_wasq_weight(self, crop: str) -> float:
        """Weight of one wasq of the crop in kg, or the configured default."""
        default = self.config.get('agricultural.wasq_weights.default', DEFAULT_WASQ_WEIGHT_KG)
        return float(self.config.get(f'agricultural.wasq_weights.{crop}', default))

    def get_agricultural_nisab_weight(self, crop: str) -> float:
        return WASQS_PER_AGRICULTURAL_NISAB * self.get_wasq_weight(crop)

    def check_agricultural_nisab(self, crop: str, weight_kg: float) -> bool:
        return weight_kg >= self.get_agricultural_nisab_weight(crop)

    def get_agricultural_zakat_rate(self, is_irrigated: bool) -> float:
        if is_irrigated:
            return float(self.config.get('agricultural.irrigated_rate', IRRIGATED_RATE))
        return float(self.config.get('agricultural.non_irrigated_rate', NON_IRRIGATED_RATE))
