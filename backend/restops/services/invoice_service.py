"""Purchase invoices: manual entry and confirmation of AI extractions.

Every invoice line is received into stock through the weighted-average
purchase path. The invoice, its lines and the stock changes share one
transaction.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from restops.db.session import unit_of_work
from restops.models.inventory import Ingredient, Supplier
from restops.models.invoice import InvoiceStatus, PurchaseInvoice, PurchaseInvoiceLine
from restops.schemas.ai import ExtractedInvoiceItem, MatchedInvoiceItem
from restops.schemas.invoice import InvoiceLineIn
from restops.services.audit_service import log_action
from restops.services.errors import NotFoundError, ValidationError
from restops.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)


def match_ingredient(name: str, inventory: Iterable[Ingredient]) -> Optional[Ingredient]:
    """First ingredient whose name contains, or is contained in, ``name``.

    Comparison is case-insensitive and ignores surrounding whitespace.
    """
    needle = name.lower().strip()
    if not needle:
        return None
    for ingredient in inventory:
        candidate = ingredient.name.lower().strip()
        if candidate and (candidate in needle or needle in candidate):
            return ingredient
    return None


def match_extracted_items(
    items: Sequence[ExtractedInvoiceItem], inventory: Sequence[Ingredient]
) -> List[MatchedInvoiceItem]:
    matched = []
    for item in items:
        hit = match_ingredient(item.name, inventory)
        matched.append(MatchedInvoiceItem(
            name=item.name,
            quantity=item.quantity,
            unit=item.unit,
            cost_per_unit=item.cost_per_unit,
            is_new=hit is None,
            matched_id=hit.id if hit else None,
        ))
    return matched


def parse_invoice_date(value: Optional[str]) -> date:
    """ISO date from an extraction, or today when absent or unreadable."""
    if value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            logger.warning("Unreadable invoice date %r, using today", value)
    return datetime.now(timezone.utc).date()


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.inventory = InventoryService(db)

    def get(self, invoice_id: str) -> PurchaseInvoice:
        invoice = self.db.get(PurchaseInvoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def list_invoices(self, status: Optional[str] = None) -> List[PurchaseInvoice]:
        query = self.db.query(PurchaseInvoice)
        if status:
            query = query.filter(PurchaseInvoice.status == status)
        return query.order_by(PurchaseInvoice.invoice_date.desc()).all()

    def create(
        self,
        lines: Sequence[InvoiceLineIn],
        supplier_id: Optional[str] = None,
        invoice_number: Optional[str] = None,
        invoice_date: Optional[date] = None,
        status: str = InvoiceStatus.UNPAID.value,
    ) -> PurchaseInvoice:
        """Record an invoice and receive each line into stock.

        Lines with an ``ingredient_id`` restock that ingredient; the rest
        create new ingredients.
        """
        if not lines:
            raise ValidationError("An invoice needs at least one line")
        if supplier_id and self.db.get(Supplier, supplier_id) is None:
            raise NotFoundError("Supplier", supplier_id)
        for line in lines:
            if line.ingredient_id:
                self.inventory.get(line.ingredient_id)

        invoice_date = invoice_date or datetime.now(timezone.utc).date()
        received_at = datetime.combine(invoice_date, time.min, tzinfo=timezone.utc)

        with unit_of_work(self.db):
            rows = []
            for pos, line in enumerate(lines):
                if line.ingredient_id:
                    ingredient = self.inventory.receive_purchase(
                        line.ingredient_id, line.quantity, line.cost_per_unit,
                        date=received_at, commit=False,
                    )
                else:
                    ingredient = self.inventory.add_from_purchase(
                        line.name, line.unit, line.quantity, line.cost_per_unit,
                        date=received_at, supplier_id=supplier_id,
                    )
                    self.db.flush()
                rows.append(PurchaseInvoiceLine(
                    ingredient_id=ingredient.id,
                    name=line.name,
                    quantity=line.quantity,
                    unit=line.unit,
                    cost_per_unit=line.cost_per_unit,
                    position=pos,
                ))
            invoice = PurchaseInvoice(
                supplier_id=supplier_id,
                invoice_number=invoice_number,
                invoice_date=invoice_date,
                total_amount=sum(line.quantity * line.cost_per_unit for line in lines),
                status=status,
                lines=rows,
            )
            self.db.add(invoice)
            log_action(
                self.db, "INVOICE_ADD", "INVENTORY",
                f"Added invoice with {len(rows)} items. Total: {invoice.total_amount:,.0f}",
            )
        self.db.refresh(invoice)
        return invoice

    def confirm_extracted(
        self,
        items: Sequence[MatchedInvoiceItem],
        invoice_date: Optional[str] = None,
        supplier_id: Optional[str] = None,
    ) -> PurchaseInvoice:
        """Persist a reviewed AI extraction as an invoice."""
        lines = [
            InvoiceLineIn(
                name=item.name,
                quantity=item.quantity,
                unit=item.unit,
                cost_per_unit=item.cost_per_unit,
                ingredient_id=None if item.is_new else item.matched_id,
            )
            for item in items
        ]
        return self.create(lines, supplier_id=supplier_id, invoice_date=parse_invoice_date(invoice_date))

    def mark_paid(self, invoice_id: str) -> PurchaseInvoice:
        invoice = self.get(invoice_id)
        with unit_of_work(self.db):
            invoice.status = InvoiceStatus.PAID.value
            log_action(self.db, "UPDATE", "INVOICE", f"Invoice {invoice.invoice_number or invoice.id} paid")
        self.db.refresh(invoice)
        return invoice
