"""Exceptions raised by the zakat engine."""


class ZakatError(Exception):
    """Base class for all zakat engine errors."""


class InvalidInput(ZakatError, ValueError):
    """A declared asset, price or option failed validation.

    Raised by setters at the point of assignment; the rejected call leaves
    the calculator state unchanged.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NegativeValue(InvalidInput):
    def __init__(self, field: str):
        super().__init__(f"{field} cannot be negative", field=field)


class InvalidKarat(InvalidInput):
    def __init__(self, karat):
        super().__init__(f"Unsupported gold karat: {karat}", field='karat')
        self.karat = karat


class InvalidWeightUnit(InvalidInput):
    def __init__(self, unit):
        super().__init__(
            f"Invalid weight unit: {unit}. Supported units are: gram, ounce",
            field='weight_unit',
        )
        self.unit = unit


class InvalidCalculationMethod(InvalidInput):
    def __init__(self, method):
        super().__init__(f"Unsupported calculation method: {method}", field='calculation_method')
        self.method = method


class CacheError(ZakatError):
    """The price cache could not be read or written."""


class ConfigError(ZakatError):
    """A configuration file could not be loaded."""
