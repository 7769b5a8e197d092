"""Zakat calculation service."""
import logging
from dataclasses import dataclass
from typing import Optional

from zakat_engine.constants import (
    CALCULATION_METHODS,
    DEFAULT_CALCULATION_METHOD,
    DEFAULT_CASH_NISAB_BASIS,
    DEFAULT_PRECISION,
    DEFAULT_WEIGHT_UNIT,
    NISAB_BASES,
    PURE_GOLD_KARAT,
    SUPPORTED_KARATS,
    ZAKAT_RATE,
)
from zakat_engine.exceptions import InvalidCalculationMethod, InvalidInput, InvalidKarat
from zakat_engine.services.config import ZakatConfig
from zakat_engine.services.nisab import NisabService
from zakat_engine.services.validation import round_money, to_grams, to_non_negative

logger = logging.getLogger('zakat_engine.calc')


@dataclass
class GoldItem:
    """A piece of gold, weight already converted to grams."""
    weight_grams: float
    karat: int


@dataclass
class AgriculturalProduct:
    """A harvest of one crop."""
    weight_kg: float
    is_irrigated: bool


def karat_to_fraction(karat: int) -> float:
    """Convert karat to purity fraction. 24K=1.0, 18K=0.75, etc."""
    return karat / float(PURE_GOLD_KARAT)


def calculate_pure_grams(weight: float, karat: int) -> float:
    return weight * karat_to_fraction(karat)


def levy_on(value: float, threshold: float) -> float:
    """2.5% of value when it reaches the threshold, else nothing."""
    return value * ZAKAT_RATE if value >= threshold else 0.0


def format_amount(amount: float, config: ZakatConfig) -> str:
    """Render an amount with the configured currency symbol and precision."""
    precision = int(config.get('precision', DEFAULT_PRECISION))
    symbol = config.get('currency.symbol', '')
    text = f"{round_money(amount, precision):,.{precision}f}"
    if config.get('currency.position', 'before') == 'after':
        return f"{text} {symbol}".strip()
    return f"{symbol} {text}".strip()


class ZakatCalculator:
    """Accumulates declared assets and computes the zakat owed on them.

    Setters validate their input immediately, raise an InvalidInput subclass
    on bad values (leaving the calculator untouched) and return the
    calculator so calls can be chained:

        result = (ZakatCalculator(nisab_service)
                  .set_cash(10000)
                  .add_gold_item(22, 50)
                  .calculate())

    One calculator is meant for one calculation session.
    """

    def __init__(self, nisab_service: NisabService, config: Optional[ZakatConfig] = None):
        self.nisab = nisab_service
        self.config = config if config is not None else nisab_service.config

        self._cash = 0.0
        self._gold_items: list[GoldItem] = []
        self._silver_weight = 0.0
        self._business_assets: dict[str, float] = {}
        self._agricultural_products: dict[str, AgriculturalProduct] = {}

        method = self.config.get('calculation_methods.default', DEFAULT_CALCULATION_METHOD)
        if method not in CALCULATION_METHODS:
            raise InvalidCalculationMethod(method)
        self._calculation_method = method

    # Settings

    @property
    def supported_karats(self) -> list:
        return list(self.config.get('supported_karats', SUPPORTED_KARATS))

    @property
    def precision(self) -> int:
        return int(self.config.get('precision', DEFAULT_PRECISION))

    @property
    def weight_unit(self) -> str:
        return self.config.get('weight_unit', DEFAULT_WEIGHT_UNIT)

    @property
    def cash_nisab_basis(self) -> str:
        basis = self.config.get('nisab.cash_basis', DEFAULT_CASH_NISAB_BASIS)
        if basis not in NISAB_BASES:
            raise InvalidInput(f"Unknown nisab basis: {basis}", field='nisab.cash_basis')
        return basis

    # Declared state

    @property
    def cash(self) -> float:
        return self._cash

    @property
    def gold_items(self) -> list[GoldItem]:
        return list(self._gold_items)

    @property
    def silver_weight(self) -> float:
        return self._silver_weight

    @property
    def business_assets(self) -> dict[str, float]:
        return dict(self._business_assets)

    @property
    def agricultural_products(self) -> dict[str, AgriculturalProduct]:
        return dict(self._agricultural_products)

    @property
    def calculation_method(self) -> str:
        return self._calculation_method

    # Setters

    def set_cash(self, amount) -> 'ZakatCalculator':
        self._cash = to_non_negative(amount, 'cash')
        return self

    def _make_gold_item(self, karat, weight, unit: Optional[str] = None) -> GoldItem:
        if weight is None:
            raise InvalidInput('gold weight is required', field='gold weight')
        weight = to_non_negative(weight, 'gold weight')
        if isinstance(karat, bool) or karat not in self.supported_karats:
            raise InvalidKarat(karat)
        return GoldItem(weight_grams=to_grams(weight, unit or self.weight_unit), karat=int(karat))

    def add_gold_item(self, karat, weight, unit: Optional[str] = None) -> 'ZakatCalculator':
        """Append one gold item; weight is in the configured unit unless given."""
        self._gold_items.append(self._make_gold_item(karat, weight, unit))
        return self

    def set_gold_items(self, items) -> 'ZakatCalculator':
        """Replace all gold items.

        Each item is a GoldItem or a mapping with ``karat`` and either
        ``weight_grams`` or ``weight`` (in the configured unit, or ``unit``).
        """
        validated = []
        for item in items:
            if isinstance(item, GoldItem):
                validated.append(self._make_gold_item(item.karat, item.weight_grams, 'gram'))
            elif 'weight_grams' in item:
                validated.append(self._make_gold_item(item.get('karat'), item['weight_grams'], 'gram'))
            else:
                validated.append(self._make_gold_item(item.get('karat'), item.get('weight'), item.get('unit')))
        self._gold_items = validated
        return self

    def set_silver_weight(self, weight, unit: Optional[str] = None) -> 'ZakatCalculator':
        weight = to_non_negative(weight, 'silver weight')
        self._silver_weight = to_grams(weight, unit or self.weight_unit)
        return self

    def set_business_assets(self, assets: dict) -> 'ZakatCalculator':
        """Replace business assets, a mapping of label to amount."""
        validated = {
            label: to_non_negative(amount, f'business asset {label}')
            for label, amount in assets.items()
        }
        self._business_assets = validated
        return self

    def set_agricultural_products(self, products: dict) -> 'ZakatCalculator':
        """Replace agricultural products, a mapping of crop to harvest.

        Each harvest is an AgriculturalProduct or a mapping with
        ``weight_kg`` (or ``weight``) and ``is_irrigated``.
        """
        validated = {}
        for crop, product in products.items():
            if isinstance(product, AgriculturalProduct):
                weight, irrigated = product.weight_kg, product.is_irrigated
            else:
                weight = product.get('weight_kg', product.get('weight'))
                irrigated = product.get('is_irrigated', product.get('irrigated', False))
            if weight is None:
                raise InvalidInput(f'{crop} weight is required', field=f'{crop} weight')
            validated[crop] = AgriculturalProduct(
                weight_kg=to_non_negative(weight, f'{crop} weight'),
                is_irrigated=bool(irrigated),
            )
        self._agricultural_products = validated
        return self

    def set_calculation_method(self, method: str) -> 'ZakatCalculator':
        if method not in CALCULATION_METHODS:
            raise InvalidCalculationMethod(method)
        self._calculation_method = method
        return self

    def set_gold_price(self, price) -> 'ZakatCalculator':
        self.nisab.set_gold_price(price)
        return self

    def set_silver_price(self, price) -> 'ZakatCalculator':
        self.nisab.set_silver_price(price)
        return self

    # Calculation

    def _cash_detail(self, threshold: float) -> tuple[dict, float]:
        p = self.precision
        zakat = levy_on(self._cash, threshold)
        return {
            'amount': round_money(self._cash, p),
            'nisab': round_money(threshold, p),
            'above_nisab': self._cash >= threshold,
            'zakat': round_money(zakat, p),
        }, zakat

    def _gold_detail(self, threshold: float) -> tuple[dict, float]:
        p = self.precision
        price = self.nisab.get_gold_price()
        items_out = []
        total_value = 0.0
        for item in self._gold_items:
            pure = calculate_pure_grams(item.weight_grams, item.karat)
            value = pure * price
            items_out.append({
                'karat': item.karat,
                'weight_grams': item.weight_grams,
                'pure_grams': round(pure, 4),
                'value': round_money(value, p),
            })
            total_value += value
        zakat = levy_on(total_value, threshold)
        return {
            'items': items_out,
            'value': round_money(total_value, p),
            'nisab': round_money(threshold, p),
            'above_nisab': total_value >= threshold,
            'zakat': round_money(zakat, p),
        }, zakat

    def _silver_detail(self, threshold: float) -> tuple[dict, float]:
        p = self.precision
        value = self._silver_weight * self.nisab.get_silver_price()
        zakat = levy_on(value, threshold)
        return {
            'weight_grams': self._silver_weight,
            'value': round_money(value, p),
            'nisab': round_money(threshold, p),
            'above_nisab': value >= threshold,
            'zakat': round_money(zakat, p),
        }, zakat

    def _business_detail(self, threshold: float) -> tuple[dict, float]:
        p = self.precision
        included = {}
        excluded = []
        for label, amount in self._business_assets.items():
            if self.config.get(f'business.{label}', True) is False:
                excluded.append(label)
            else:
                included[label] = amount
        value = sum(included.values())
        zakat = levy_on(value, threshold)
        return {
            'assets': {label: round_money(amount, p) for label, amount in self._business_assets.items()},
            'excluded': excluded,
            'value': round_money(value, p),
            'nisab': round_money(threshold, p),
            'above_nisab': value >= threshold,
            'zakat': round_money(zakat, p),
        }, zakat

    def _agricultural_detail(self) -> tuple[dict, float]:
        p = self.precision
        products_out = {}
        total = 0.0
        for crop, product in self._agricultural_products.items():
            rate = self.nisab.get_agricultural_zakat_rate(product.is_irrigated)
            above = self.nisab.check_agricultural_nisab(crop, product.weight_kg)
            zakat = product.weight_kg * rate if above else 0.0
            products_out[crop] = {
                'weight_kg': product.weight_kg,
                'is_irrigated': product.is_irrigated,
                'nisab_weight_kg': self.nisab.get_agricultural_nisab_weight(crop),
                'above_nisab': above,
                'rate': rate,
                'zakat': round_money(zakat, p),
            }
            total += zakat
        return {'products': products_out, 'zakat': round_money(total, p)}, total

    def _warn_on_zero_prices(self) -> None:
        prices = {'gold': self.nisab.get_gold_price(), 'silver': self.nisab.get_silver_price()}
        for metal, price in prices.items():
            if price == 0:
                logger.warning(
                    f"{metal.title()} price is zero (source: {self.nisab.price_sources[metal]}); "
                    f"the {metal} nisab threshold is 0"
                )

    def calculate(self) -> dict:
        """Compute zakat for every declared category.

        Returns:
            Dict with total_zakat, calculation_method, per-category details
            (only categories with something declared), the nisab thresholds
            used, the metal prices and their sources, and currency settings.
        """
        self._warn_on_zero_prices()
        p = self.precision
        basis = self.cash_nisab_basis
        gold_nisab = self.nisab.get_gold_nisab_value()
        silver_nisab = self.nisab.get_silver_nisab_value()
        cash_nisab = self.nisab.get_nisab_value(basis)

        details = {}
        total = 0.0

        if self._cash > 0:
            details['cash'], zakat = self._cash_detail(cash_nisab)
            total += zakat
        if any(item.weight_grams > 0 for item in self._gold_items):
            details['gold'], zakat = self._gold_detail(gold_nisab)
            total += zakat
        if self._silver_weight > 0:
            details['silver'], zakat = self._silver_detail(silver_nisab)
            total += zakat
        if any(amount > 0 for amount in self._business_assets.values()):
            details['business'], zakat = self._business_detail(cash_nisab)
            total += zakat
        if any(product.weight_kg > 0 for product in self._agricultural_products.values()):
            details['agricultural'], zakat = self._agricultural_detail()
            total += zakat

        logger.debug(f"Zakat total {total} across {sorted(details)} ({self._calculation_method})")

        return {
            'total_zakat': round_money(total, p),
            'calculation_method': self._calculation_method,
            'details': details,
            'nisab': {
                'gold_grams': self.nisab.get_gold_nisab_weight(),
                'gold_threshold': round_money(gold_nisab, p),
                'silver_grams': self.nisab.get_silver_nisab_weight(),
                'silver_threshold': round_money(silver_nisab, p),
                'cash_basis': basis,
                'cash_threshold': round_money(cash_nisab, p),
            },
            'prices': self.nisab.get_prices(),
            'currency': {
                'code': self.config.get('currency.code'),
                'symbol': self.config.get('currency.symbol'),
                'position': self.config.get('currency.position', 'before'),
            },
            'zakat_rate': ZAKAT_RATE,
        }
