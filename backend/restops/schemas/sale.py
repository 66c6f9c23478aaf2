"""Point-of-sale and shift schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from restops.models.sale import PaymentMethod, SaleStatus, ShiftStatus


class CartLineIn(BaseModel):
    menu_item_id: str
    quantity: float = Field(gt=0)


class CartRequest(BaseModel):
    """Cart contents and pricing options, shared by preview and checkout."""

    items: List[CartLineIn]
    discount: float = Field(default=0, ge=0)
    discount_type: Literal["percent", "amount"] = "amount"
    include_tax: bool = False


class CheckoutRequest(CartRequest):
    payment_method: PaymentMethod = PaymentMethod.CASH
    table_number: Optional[str] = None


class CartPreviewResponse(BaseModel):
    subtotal: float
    discount_amount: float
    tax: float
    total: float
    total_cost: float


class SaleItemResponse(BaseModel):
    id: str
    menu_item_id: str
    quantity: float
    price_at_sale: float
    cost_at_sale: float

    model_config = {"from_attributes": True}


class SaleResponse(BaseModel):
    id: str
    timestamp: datetime
    items: List[SaleItemResponse] = []
    total_amount: float
    total_cost: float
    tax: float
    discount: float
    payment_method: PaymentMethod
    shift_id: Optional[str] = None
    table_number: Optional[str] = None
    status: SaleStatus

    model_config = {"from_attributes": True}


class SaleStatusUpdate(BaseModel):
    status: SaleStatus


class SalesImportResponse(BaseModel):
    sale: Optional[SaleResponse] = None
    rows_imported: int
    rows_skipped: int
    menu_items_created: int


# ============== Shifts ==============

class ShiftOpen(BaseModel):
    starting_cash: float = Field(default=0, ge=0)
    operator_name: Optional[str] = None


class ShiftClose(BaseModel):
    actual_cash: float = Field(ge=0)
    bank_deposit: Optional[float] = Field(default=None, ge=0)


class ShiftResponse(BaseModel):
    id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    starting_cash: float
    expected_cash: Optional[float] = None
    actual_cash: Optional[float] = None
    card_sales: Optional[float] = None
    online_sales: Optional[float] = None
    bank_deposit: Optional[float] = None
    discrepancy: Optional[float] = None
    status: ShiftStatus
    operator_name: Optional[str] = None

    model_config = {"from_attributes": True}
