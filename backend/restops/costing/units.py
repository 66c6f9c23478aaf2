"""Unit conversion table for recipe and stock quantities.

Factors are multiplicative: ``qty_in_to_unit = qty_in_from_unit * factor``.
Only the mass group (kg, gram) and the volume group (liter, ml, cc) are
convertible; count-like units (number, pack, can, portion) only match
themselves.
"""

import logging
from typing import Dict

from restops.costing.errors import UnsupportedConversion

logger = logging.getLogger(__name__)

UNITS = ("kg", "gram", "liter", "ml", "cc", "number", "pack", "can", "portion")

CONVERSIONS: Dict[str, Dict[str, float]] = {
    "kg": {"gram": 1000.0},
    "gram": {"kg": 0.001},
    "liter": {"ml": 1000.0, "cc": 1000.0},
    "ml": {"liter": 0.001, "cc": 1.0},
    "cc": {"liter": 0.001, "ml": 1.0},
}


def _lookup(from_unit: str, to_unit: str):
    if from_unit == to_unit:
        return 1.0
    return CONVERSIONS.get(from_unit, {}).get(to_unit)


def strict_conversion_factor(from_unit: str, to_unit: str) -> float:
    """Return the factor from ``from_unit`` to ``to_unit`` or raise."""
    factor = _lookup(from_unit, to_unit)
    if factor is None:
        raise UnsupportedConversion(from_unit, to_unit)
    return factor


def resolve_conversion_factor(from_unit: str, to_unit: str) -> float:
    """Return the factor from ``from_unit`` to ``to_unit``.

    Unknown pairs resolve to 1 so that malformed recipe data never breaks a
    screen; a warning is logged so the data can be fixed.
    """
    factor = _lookup(from_unit, to_unit)
    if factor is None:
        logger.warning("No conversion from %r to %r, using factor 1", from_unit, to_unit)
        return 1.0
    return factor


def is_convertible(from_unit: str, to_unit: str) -> bool:
    return _lookup(from_unit, to_unit) is not None
