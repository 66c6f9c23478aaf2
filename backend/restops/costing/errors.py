"""Errors raised by the costing calculators.

The calculators degrade gracefully on missing references; these are only
raised for malformed requests that boundary code should have rejected.
"""


class CostingError(ValueError):
    """Base class for calculator input errors."""


class EmptyCart(CostingError):
    """A checkout was attempted with no cart lines."""

    def __init__(self):
        super().__init__("Cannot settle an empty cart")


class InvalidQuantity(CostingError):
    """A quantity that must be positive was zero or negative."""

    def __init__(self, what: str, value: float):
        self.what = what
        self.value = value
        super().__init__(f"{what} must be greater than zero (got {value})")


class UnsupportedConversion(CostingError):
    """No conversion factor is registered between two units."""

    def __init__(self, from_unit: str, to_unit: str):
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(f"Cannot convert '{from_unit}' to '{to_unit}'")
