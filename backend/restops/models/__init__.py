"""SQLAlchemy models."""

from restops.models.inventory import Supplier, Ingredient, PurchaseLot, WasteRecord
from restops.models.prep import PrepTask, PrepRecipeLine
from restops.models.menu import MenuItem, MenuRecipeLine
from restops.models.sale import (
    Sale,
    SaleItem,
    Shift,
    PaymentMethod,
    SaleStatus,
    ShiftStatus,
    SALE_STATUS_ORDER,
)
from restops.models.invoice import PurchaseInvoice, PurchaseInvoiceLine, InvoiceStatus
from restops.models.expense import Expense, ExpenseCategory
from restops.models.audit import AuditLog

__all__ = [
    "Supplier",
    "Ingredient",
    "PurchaseLot",
    "WasteRecord",
    "PrepTask",
    "PrepRecipeLine",
    "MenuItem",
    "MenuRecipeLine",
    "Sale",
    "SaleItem",
    "Shift",
    "PaymentMethod",
    "SaleStatus",
    "ShiftStatus",
    "SALE_STATUS_ORDER",
    "PurchaseInvoice",
    "PurchaseInvoiceLine",
    "InvoiceStatus",
    "Expense",
    "ExpenseCategory",
    "AuditLog",
]
