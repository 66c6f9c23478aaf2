"""Point-of-sale service: checkout, historical import and kitchen status.

A checkout is one transaction: the sale row, its frozen lines and every
inventory and prep deduction commit together or not at all.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from restops.core.config import settings
from restops.costing.money import round_half_up
from restops.costing.production import deduct
from restops.costing.recipe import recipe_cost
from restops.costing.settlement import CartLine, Settlement, settle
from restops.costing.units import resolve_conversion_factor
from restops.db.session import unit_of_work
from restops.models.menu import MenuItem
from restops.models.sale import (
    SALE_STATUS_ORDER,
    PaymentMethod,
    Sale,
    SaleItem,
    SaleStatus,
    Shift,
    ShiftStatus,
)
from restops.schemas.ai import NewItemRow, ProcessedSaleRow
from restops.services.audit_service import log_action
from restops.services.catalog import inventory_map, prep_map
from restops.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CURRENCY_FACTORS = {"toman": 1.0, "rial": 1.0 / settings.rial_per_toman}


class SalesService:
    """Service for sales and the register."""

    def __init__(self, db: Session, tax_rate: Optional[float] = None):
        self.db = db
        self.tax_rate = settings.tax_rate if tax_rate is None else tax_rate

    def get(self, sale_id: str) -> Sale:
        sale = self.db.get(Sale, sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale

    def list_sales(
        self, shift_id: Optional[str] = None, skip: int = 0, limit: int = 200
    ) -> Tuple[List[Sale], int]:
        """A page of sales, newest first, and the total matching count."""
        query = self.db.query(Sale)
        if shift_id:
            query = query.filter(Sale.shift_id == shift_id)
        total = query.count()
        rows = query.order_by(Sale.timestamp.desc()).offset(skip).limit(limit).all()
        return rows, total

    def _open_shift(self) -> Optional[Shift]:
        return self.db.query(Shift).filter(Shift.status == ShiftStatus.OPEN.value).first()

    def _cart(self, lines: Sequence[Tuple[str, float]]) -> List[CartLine]:
        cart = []
        for menu_item_id, quantity in lines:
            menu_item = self.db.get(MenuItem, menu_item_id)
            if menu_item is None:
                raise NotFoundError("Menu item", menu_item_id)
            cart.append(CartLine(menu_item=menu_item, quantity=quantity))
        return cart

    # ===== CHECKOUT =====

    def preview(
        self,
        lines: Sequence[Tuple[str, float]],
        discount: float = 0,
        discount_type: str = "amount",
        include_tax: bool = False,
    ) -> Settlement:
        """Price a cart without touching stock."""
        return settle(
            self._cart(lines), discount, discount_type, include_tax,
            inventory_map(self.db), prep_map(self.db), tax_rate=self.tax_rate,
        )

    def checkout(
        self,
        lines: Sequence[Tuple[str, float]],
        payment_method: str = PaymentMethod.CASH.value,
        discount: float = 0,
        discount_type: str = "amount",
        include_tax: bool = False,
        table_number: Optional[str] = None,
    ) -> Sale:
        """Settle a cart, record the sale and deduct stock atomically.

        ``lines`` are ``(menu_item_id, quantity)`` pairs. Raises ``EmptyCart``
        for an empty cart and ``NotFoundError`` for unknown menu items.
        """
        inventory = inventory_map(self.db)
        prep = prep_map(self.db)
        settlement = settle(
            self._cart(lines), discount, discount_type, include_tax,
            inventory, prep, tax_rate=self.tax_rate,
        )
        shift = self._open_shift()

        with unit_of_work(self.db):
            sale = Sale(
                total_amount=settlement.total,
                total_cost=settlement.total_cost,
                tax=settlement.tax,
                discount=settlement.discount_amount,
                payment_method=payment_method,
                shift_id=shift.id if shift else None,
                table_number=table_number,
                status=SaleStatus.PENDING.value,
                items=[
                    SaleItem(
                        menu_item_id=item.menu_item_id,
                        quantity=item.quantity,
                        price_at_sale=item.price_at_sale,
                        cost_at_sale=item.cost_at_sale,
                    )
                    for item in settlement.items
                ],
            )
            self.db.add(sale)
            self._apply_deductions(inventory, settlement.inventory_deductions, "current_stock")
            self._apply_deductions(prep, settlement.prep_deductions, "on_hand")
            log_action(
                self.db, "SALE", "SALE",
                f"Sale of {len(settlement.items)} line(s), total {settlement.total:,.0f} ({payment_method})",
            )
        self.db.refresh(sale)
        logger.info("Checkout %s: total=%s cost=%s", sale.id, sale.total_amount, sale.total_cost)
        return sale

    @staticmethod
    def _apply_deductions(catalog: Dict[str, object], deductions: Dict[str, float], field: str) -> None:
        for item_id, amount in deductions.items():
            row = catalog[item_id]
            setattr(row, field, deduct(getattr(row, field), amount))

    # ===== IMPORT =====

    def import_sales(
        self,
        processed_sales: Sequence[ProcessedSaleRow],
        new_items_found: Sequence[NewItemRow] = (),
        currency: str = "toman",
    ) -> Tuple[Optional[Sale], int, int, int]:
        """Record historical sales from a reviewed spreadsheet extraction.

        Prices are converted to toman and rounded. Names not on the menu are
        added as menu items with an empty recipe. All rows go into one
        delivered card sale and their recipes are deducted from inventory.

        Returns ``(sale, rows_imported, rows_skipped, menu_items_created)``;
        ``sale`` is None when no row matched a menu item.
        """
        if currency not in CURRENCY_FACTORS:
            raise ValidationError(f"Unknown currency {currency!r}")
        factor = CURRENCY_FACTORS[currency]
        inventory = inventory_map(self.db)
        shift = self._open_shift()

        with unit_of_work(self.db):
            menu_by_name = {m.name: m for m in self.db.query(MenuItem).all()}
            created = 0
            for found in new_items_found:
                if found.name in menu_by_name:
                    continue
                item = MenuItem(
                    name=found.name,
                    category=found.category or "general",
                    price=round_half_up(found.price * factor),
                    recipe=[],
                )
                self.db.add(item)
                menu_by_name[found.name] = item
                created += 1
            self.db.flush()

            sale_items: List[SaleItem] = []
            deductions: Dict[str, float] = {}
            total_amount = 0.0
            total_cost = 0.0
            skipped = 0
            for row in processed_sales:
                menu_item = menu_by_name.get(row.item_name)
                if menu_item is None or row.quantity <= 0:
                    skipped += 1
                    continue
                price = round_half_up(row.price_per_item * factor)
                # Historical imports only cost and deduct raw inventory lines.
                inventory_lines = [r for r in menu_item.recipe if r.source != "prep"]
                unit_cost = recipe_cost(inventory_lines, inventory)
                total_amount += price * row.quantity
                total_cost += unit_cost * row.quantity
                sale_items.append(SaleItem(
                    menu_item_id=menu_item.id,
                    quantity=row.quantity,
                    price_at_sale=price,
                    cost_at_sale=unit_cost,
                ))
                for line in inventory_lines:
                    ingredient = inventory.get(line.item_id)
                    if ingredient is None:
                        continue
                    amount = line.amount * resolve_conversion_factor(line.unit, ingredient.unit) * row.quantity
                    deductions[line.item_id] = deductions.get(line.item_id, 0.0) + amount

            sale = None
            if sale_items:
                sale = Sale(
                    total_amount=total_amount,
                    total_cost=round_half_up(total_cost),
                    tax=0.0,
                    discount=0.0,
                    payment_method=PaymentMethod.CARD.value,
                    shift_id=shift.id if shift else None,
                    status=SaleStatus.DELIVERED.value,
                    items=sale_items,
                )
                self.db.add(sale)
                self._apply_deductions(inventory, deductions, "current_stock")
                log_action(
                    self.db, "SALE", "SALE",
                    f"Imported {len(sale_items)} sales row(s), total {total_amount:,.0f}",
                )

        if sale is not None:
            self.db.refresh(sale)
        return sale, len(sale_items), skipped, created

    # ===== STATUS =====

    def advance_status(self, sale_id: str, status: str) -> Sale:
        """Move a sale forward through pending, preparing, ready, delivered."""
        sale = self.get(sale_id)
        current = SALE_STATUS_ORDER.index(sale.status)
        target = SALE_STATUS_ORDER.index(status)
        if target <= current:
            raise ValidationError(f"Cannot move sale from {sale.status} to {status}")
        with unit_of_work(self.db):
            sale.status = status
        self.db.refresh(sale)
        return sale
