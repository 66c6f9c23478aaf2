"""Inventory service: ingredients, purchases and waste.

Every stock-in goes through :meth:`InventoryService.receive_purchase`, which
blends the incoming lot into the ingredient's weighted-average cost and
appends it to the purchase history. Opening stock on creation and invoice
lines take the same path.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from restops.costing.errors import InvalidQuantity
from restops.costing.production import deduct
from restops.costing.purchase import apply_purchase
from restops.costing.recipe import SOURCE_PREP
from restops.db.session import unit_of_work
from restops.models.inventory import Ingredient, PurchaseLot, Supplier, WasteRecord
from restops.models.prep import PrepTask
from restops.services.audit_service import log_action
from restops.services.errors import NotFoundError, ValidationError, require_values

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for raw ingredient stock."""

    def __init__(self, db: Session):
        self.db = db

    # ===== LOOKUPS =====

    def get(self, ingredient_id: str) -> Ingredient:
        ingredient = self.db.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    def list_items(self, search: Optional[str] = None) -> List[Ingredient]:
        query = self.db.query(Ingredient)
        if search:
            query = query.filter(Ingredient.name.ilike(f"%{search}%"))
        return query.order_by(Ingredient.name).all()

    def _check_supplier(self, supplier_id: Optional[str]) -> None:
        if supplier_id and self.db.get(Supplier, supplier_id) is None:
            raise NotFoundError("Supplier", supplier_id)

    # ===== CRUD =====

    def create(
        self,
        name: str,
        unit: str,
        current_stock: float = 0,
        cost_per_unit: float = 0,
        min_threshold: float = 0,
        supplier_id: Optional[str] = None,
    ) -> Ingredient:
        """Create an ingredient; opening stock is recorded as its first lot."""
        self._check_supplier(supplier_id)
        with unit_of_work(self.db):
            ingredient = Ingredient(
                name=name,
                unit=unit,
                current_stock=0.0,
                cost_per_unit=cost_per_unit,
                min_threshold=min_threshold,
                supplier_id=supplier_id,
            )
            self.db.add(ingredient)
            if current_stock > 0:
                self._apply_lot(ingredient, current_stock, cost_per_unit)
            log_action(self.db, "CREATE", "INVENTORY", f"Created new item: {name}")
        self.db.refresh(ingredient)
        return ingredient

    def update(self, ingredient_id: str, version: Optional[int] = None, **changes) -> Ingredient:
        ingredient = self.get(ingredient_id)
        ingredient.check_version(version)
        require_values(changes, ("name", "unit", "min_threshold"))
        if "supplier_id" in changes:
            self._check_supplier(changes["supplier_id"])
        with unit_of_work(self.db):
            for key, value in changes.items():
                setattr(ingredient, key, value)
            log_action(self.db, "UPDATE", "INVENTORY", f"Updated item: {ingredient.name}")
        self.db.refresh(ingredient)
        return ingredient

    def delete(self, ingredient_id: str) -> None:
        """Delete an ingredient. Recipes still pointing at it cost it as zero."""
        ingredient = self.get(ingredient_id)
        with unit_of_work(self.db):
            log_action(self.db, "DELETE", "INVENTORY", f"Deleted item: {ingredient.name}")
            self.db.delete(ingredient)

    def adjust_stock(
        self,
        ingredient_id: str,
        delta: float = 0,
        cost_per_unit: Optional[float] = None,
        reason: Optional[str] = None,
        version: Optional[int] = None,
    ) -> Ingredient:
        """Correct a miscount and optionally override the unit cost.

        Stock is clamped at zero. No purchase lot is recorded, so the
        weighted average continues from the corrected figures.
        """
        if cost_per_unit is not None and cost_per_unit < 0:
            raise ValidationError("Cost per unit cannot be negative")
        ingredient = self.get(ingredient_id)
        ingredient.check_version(version)

        before_stock, before_cost = ingredient.current_stock, ingredient.cost_per_unit
        with unit_of_work(self.db):
            ingredient.current_stock = max(0.0, ingredient.current_stock + delta)
            if cost_per_unit is not None:
                ingredient.cost_per_unit = cost_per_unit
            log_action(
                self.db, "ADJUST", "INVENTORY",
                f"Adjusted {ingredient.name}: stock {before_stock} -> {ingredient.current_stock}, "
                f"cost {before_cost} -> {ingredient.cost_per_unit} ({reason or 'count correction'})",
            )
        self.db.refresh(ingredient)
        return ingredient

    # ===== PURCHASES =====

    def _apply_lot(
        self,
        ingredient: Ingredient,
        quantity: float,
        cost_per_unit: float,
        date: Optional[datetime] = None,
    ) -> PurchaseLot:
        outcome = apply_purchase(
            ingredient.current_stock or 0.0,
            ingredient.cost_per_unit or 0.0,
            quantity,
            cost_per_unit,
        )
        ingredient.current_stock = outcome.new_stock
        ingredient.cost_per_unit = outcome.new_cost_per_unit
        lot = PurchaseLot(
            quantity=quantity,
            cost_per_unit=cost_per_unit,
            date=date or datetime.now(timezone.utc),
        )
        ingredient.purchase_history.append(lot)
        return lot

    def receive_purchase(
        self,
        ingredient_id: str,
        quantity: float,
        cost_per_unit: float,
        date: Optional[datetime] = None,
        commit: bool = True,
    ) -> Ingredient:
        """Receive stock at ``cost_per_unit`` and re-average the unit cost.

        With ``commit=False`` the change joins the caller's transaction.
        """
        if quantity <= 0:
            raise InvalidQuantity("Purchase quantity", quantity)
        ingredient = self.get(ingredient_id)
        if not commit:
            self._apply_lot(ingredient, quantity, cost_per_unit, date)
            return ingredient

        with unit_of_work(self.db):
            self._apply_lot(ingredient, quantity, cost_per_unit, date)
            log_action(
                self.db, "UPDATE", "INVENTORY",
                f"Received {quantity} {ingredient.unit} of {ingredient.name} at {cost_per_unit}",
            )
        self.db.refresh(ingredient)
        logger.info(
            "Purchase for %s: stock=%s cost_per_unit=%s",
            ingredient.name, ingredient.current_stock, ingredient.cost_per_unit,
        )
        return ingredient

    def add_from_purchase(
        self,
        name: str,
        unit: str,
        quantity: float,
        cost_per_unit: float,
        date: Optional[datetime] = None,
        supplier_id: Optional[str] = None,
    ) -> Ingredient:
        """Create an ingredient first seen on an invoice, inside the caller's transaction."""
        ingredient = Ingredient(
            name=name,
            unit=unit,
            current_stock=0.0,
            cost_per_unit=0.0,
            min_threshold=0.0,
            supplier_id=supplier_id,
        )
        self.db.add(ingredient)
        self._apply_lot(ingredient, quantity, cost_per_unit, date)
        return ingredient

    # ===== WASTE =====

    def record_waste(
        self,
        item_id: str,
        amount: float,
        source: str = "inventory",
        reason: Optional[str] = None,
    ) -> WasteRecord:
        """Write off spoiled stock from an ingredient or a prep task.

        The loss is valued at the item's current unit cost. Prep waste may not
        exceed what is on hand.
        """
        if amount <= 0:
            raise InvalidQuantity("Waste amount", amount)

        if source == SOURCE_PREP:
            item = self.db.get(PrepTask, item_id)
            if item is None:
                raise NotFoundError("Prep task", item_id)
            if amount > item.on_hand:
                raise ValidationError(
                    f"Waste amount {amount} exceeds on-hand {item.on_hand} for {item.item}"
                )
            name, unit_cost = item.item, item.cost_per_unit or 0.0
        else:
            item = self.get(item_id)
            name, unit_cost = item.name, item.cost_per_unit

        cost_loss = amount * unit_cost
        with unit_of_work(self.db):
            record = WasteRecord(
                item_id=item.id,
                item_name=name,
                item_source=source,
                amount=amount,
                unit=item.unit,
                cost_loss=cost_loss,
                reason=reason or "unspecified",
            )
            self.db.add(record)
            if source == SOURCE_PREP:
                item.on_hand = deduct(item.on_hand, amount)
            else:
                item.current_stock = deduct(item.current_stock, amount)
            log_action(
                self.db, "WASTE", "PREP" if source == SOURCE_PREP else "INVENTORY",
                f"Waste recorded for {name}: {amount} {item.unit}. Loss: {cost_loss:,.0f}",
            )
        self.db.refresh(record)
        return record

    def list_waste(self) -> List[WasteRecord]:
        return self.db.query(WasteRecord).order_by(WasteRecord.date.desc()).all()
