"""Batch production of prep items (mise en place)."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from restops.costing.money import round_half_up
from restops.costing.recipe import recipe_cost
from restops.costing.units import resolve_conversion_factor


@dataclass
class ProductionPlan:
    inventory_deductions: Dict[str, float] = field(default_factory=dict)
    on_hand_delta: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.inventory_deductions and not self.on_hand_delta


def deduct(stock: float, amount: float) -> float:
    """Remove ``amount`` from ``stock`` without going below zero."""
    return max(0.0, stock - amount)


def plan_production(
    recipe: Iterable[Any],
    batch_size: Optional[float],
    batches: float,
    inventory: Mapping[str, Any],
) -> ProductionPlan:
    """Raw material consumption and on-hand credit for ``batches`` batches.

    Lines whose ingredient no longer exists are skipped. Quantities for the
    same ingredient across several lines are summed.
    """
    if batches <= 0:
        return ProductionPlan()

    deductions: Dict[str, float] = {}
    for line in recipe:
        ingredient = inventory.get(line.item_id)
        if ingredient is None:
            continue
        factor = resolve_conversion_factor(line.unit, ingredient.unit)
        deductions[line.item_id] = deductions.get(line.item_id, 0.0) + line.amount * factor * batches

    return ProductionPlan(
        inventory_deductions=deductions,
        on_hand_delta=(batch_size or 1) * batches,
    )


def prep_unit_cost(
    recipe: Iterable[Any],
    batch_size: Optional[float],
    inventory: Mapping[str, Any],
    prep_catalog: Optional[Mapping[str, Any]] = None,
) -> int:
    """Cost of one unit of a prep item, rounded to whole currency."""
    if not batch_size or batch_size <= 0:
        return 0
    return round_half_up(recipe_cost(recipe, inventory, prep_catalog) / batch_size)
