# Services module

from restops.services.inventory_service import InventoryService
from restops.services.prep_service import PrepService
from restops.services.menu_service import MenuService
from restops.services.sales_service import SalesService
from restops.services.shift_service import ShiftService
from restops.services.invoice_service import InvoiceService
from restops.services.errors import NotFoundError, ServiceError, ValidationError

__all__ = [
    "InventoryService",
    "PrepService",
    "MenuService",
    "SalesService",
    "ShiftService",
    "InvoiceService",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
]
