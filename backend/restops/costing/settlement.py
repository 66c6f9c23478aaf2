"""Sale settlement: totals, frozen line costs and stock deduction maps.

Everything a checkout needs is computed here up front. The caller applies
the deduction maps and persists the sale in one transaction.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from restops.costing.errors import EmptyCart
from restops.costing.money import round_half_up
from restops.costing.recipe import is_prep, recipe_cost, resolve_source
from restops.costing.units import resolve_conversion_factor

DEFAULT_TAX_RATE = 0.09

DISCOUNT_PERCENT = "percent"
DISCOUNT_AMOUNT = "amount"


@dataclass(frozen=True)
class CartLine:
    menu_item: Any
    quantity: float


@dataclass(frozen=True)
class SettledItem:
    menu_item_id: str
    name: str
    quantity: float
    price_at_sale: float
    cost_at_sale: float


@dataclass
class Settlement:
    items: List[SettledItem]
    subtotal: float
    discount_amount: float
    tax: float
    total: float
    total_cost: int
    inventory_deductions: Dict[str, float] = field(default_factory=dict)
    prep_deductions: Dict[str, float] = field(default_factory=dict)


def discount_amount(subtotal: float, discount: float, discount_type: str) -> float:
    """Discount in currency; never more than the subtotal."""
    discount = discount or 0
    if discount_type == DISCOUNT_PERCENT:
        pct = min(max(discount, 0), 100)
        return round_half_up(subtotal * pct / 100)
    return min(max(discount, 0), subtotal)


def tax_amount(after_discount: float, include_tax: bool, tax_rate: float = DEFAULT_TAX_RATE) -> int:
    if not include_tax:
        return 0
    return round_half_up(after_discount * tax_rate)


def _accumulate_deductions(
    recipe: Iterable[Any],
    quantity: float,
    inventory: Mapping[str, Any],
    prep_catalog: Mapping[str, Any],
    inventory_deductions: Dict[str, float],
    prep_deductions: Dict[str, float],
) -> None:
    for line in recipe:
        entry = resolve_source(line, inventory, prep_catalog)
        if entry is None:
            continue
        consumed = line.amount * resolve_conversion_factor(line.unit, entry.unit) * quantity
        target = prep_deductions if is_prep(line) else inventory_deductions
        target[line.item_id] = target.get(line.item_id, 0.0) + consumed


def settle(
    cart: Iterable[Any],
    discount: float,
    discount_type: str,
    include_tax: bool,
    inventory: Mapping[str, Any],
    prep_catalog: Optional[Mapping[str, Any]] = None,
    tax_rate: float = DEFAULT_TAX_RATE,
) -> Settlement:
    """Settle a cart of ``(menu_item, quantity)`` lines.

    Price and cost are snapshotted per line so later recipe or ingredient
    changes never alter historical sales. Raises :class:`EmptyCart` when
    there is nothing to sell.
    """
    prep_catalog = prep_catalog or {}
    lines = list(cart)
    if not lines:
        raise EmptyCart()

    items: List[SettledItem] = []
    inventory_deductions: Dict[str, float] = {}
    prep_deductions: Dict[str, float] = {}
    subtotal = 0.0
    raw_cost = 0.0

    for line in lines:
        menu_item = line.menu_item
        recipe = list(menu_item.recipe or [])
        unit_cost = recipe_cost(recipe, inventory, prep_catalog)
        subtotal += menu_item.price * line.quantity
        raw_cost += unit_cost * line.quantity
        items.append(SettledItem(
            menu_item_id=menu_item.id,
            name=menu_item.name,
            quantity=line.quantity,
            price_at_sale=menu_item.price,
            cost_at_sale=unit_cost,
        ))
        _accumulate_deductions(
            recipe, line.quantity, inventory, prep_catalog,
            inventory_deductions, prep_deductions,
        )

    discount_value = discount_amount(subtotal, discount, discount_type)
    after_discount = max(0, subtotal - discount_value)
    tax = tax_amount(after_discount, include_tax, tax_rate)

    return Settlement(
        items=items,
        subtotal=subtotal,
        discount_amount=discount_value,
        tax=tax,
        total=after_discount + tax,
        total_cost=round_half_up(raw_cost),
        inventory_deductions=inventory_deductions,
        prep_deductions=prep_deductions,
    )
