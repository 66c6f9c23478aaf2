"""Shift close (Z-report) computation."""

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class ShiftTotals:
    cash_sales: float
    card_sales: float
    online_sales: float
    expected_cash: float
    actual_cash: float
    discrepancy: float

    @property
    def total_sales(self) -> float:
        return self.cash_sales + self.card_sales + self.online_sales


def close_shift(starting_cash: float, sales: Iterable[Any], actual_cash: float) -> ShiftTotals:
    """Reconcile counted cash against what the drawer should hold.

    ``sales`` are the sales tagged with the shift; voided sales fall into
    none of the payment buckets.
    """
    totals = {"cash": 0.0, "card": 0.0, "online": 0.0}
    for sale in sales:
        if sale.payment_method in totals:
            totals[sale.payment_method] += sale.total_amount

    expected_cash = starting_cash + totals["cash"]
    return ShiftTotals(
        cash_sales=totals["cash"],
        card_sales=totals["card"],
        online_sales=totals["online"],
        expected_cash=expected_cash,
        actual_cash=actual_cash,
        discrepancy=actual_cash - expected_cash,
    )
