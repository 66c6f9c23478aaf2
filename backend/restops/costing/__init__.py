"""Pure costing calculators: unit conversion, recipe cost, purchases,
production, sale settlement, shift close and reports."""

from restops.costing.errors import CostingError, EmptyCart, InvalidQuantity, UnsupportedConversion
from restops.costing.money import round_half_up
from restops.costing.production import ProductionPlan, deduct, plan_production, prep_unit_cost
from restops.costing.purchase import PurchaseOutcome, apply_purchase
from restops.costing.recipe import RecipeLine, line_cost, recipe_breakdown, recipe_cost
from restops.costing.settlement import CartLine, Settlement, discount_amount, settle, tax_amount
from restops.costing.shift import ShiftTotals, close_shift
from restops.costing.units import resolve_conversion_factor, strict_conversion_factor

__all__ = [
    "CostingError",
    "EmptyCart",
    "InvalidQuantity",
    "UnsupportedConversion",
    "round_half_up",
    "ProductionPlan",
    "deduct",
    "plan_production",
    "prep_unit_cost",
    "PurchaseOutcome",
    "apply_purchase",
    "RecipeLine",
    "line_cost",
    "recipe_breakdown",
    "recipe_cost",
    "CartLine",
    "Settlement",
    "discount_amount",
    "settle",
    "tax_amount",
    "ShiftTotals",
    "close_shift",
    "resolve_conversion_factor",
    "strict_conversion_factor",
]
