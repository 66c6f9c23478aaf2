"""Weighted-average cost updates on stock replenishment."""

from dataclasses import dataclass

from restops.costing.money import round_half_up


@dataclass(frozen=True)
class PurchaseOutcome:
    new_stock: float
    new_cost_per_unit: float


def apply_purchase(
    current_stock: float,
    current_cost: float,
    quantity: float,
    incoming_cost: float,
) -> PurchaseOutcome:
    """Blend an incoming lot into the stock's weighted-average unit cost.

    The result is rounded to whole currency units on every purchase. With no
    prior stock the average is simply the incoming cost.
    """
    current_value = current_stock * current_cost
    incoming_value = quantity * incoming_cost
    new_stock = current_stock + quantity
    if new_stock > 0:
        new_cost = round_half_up((current_value + incoming_value) / new_stock)
    else:
        new_cost = incoming_cost
    return PurchaseOutcome(new_stock=new_stock, new_cost_per_unit=new_cost)
