"""Purchase invoice and expense schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from restops.models.expense import ExpenseCategory
from restops.models.invoice import InvoiceStatus


class InvoiceLineIn(BaseModel):
    """An invoice line. ``ingredient_id`` set means restock that ingredient,
    otherwise a new ingredient is created."""

    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = "kg"
    cost_per_unit: float = Field(ge=0)
    ingredient_id: Optional[str] = None


class InvoiceCreate(BaseModel):
    supplier_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[dt.date] = None
    status: InvoiceStatus = InvoiceStatus.UNPAID
    lines: List[InvoiceLineIn] = Field(min_length=1)


class InvoiceLineResponse(BaseModel):
    id: str
    ingredient_id: Optional[str] = None
    name: str
    quantity: float
    unit: str
    cost_per_unit: float

    model_config = {"from_attributes": True}


class InvoiceResponse(BaseModel):
    id: str
    supplier_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: dt.date
    total_amount: float
    status: InvoiceStatus
    lines: List[InvoiceLineResponse] = []

    model_config = {"from_attributes": True}


# ============== Expenses ==============

class ExpenseCreate(BaseModel):
    title: str = Field(min_length=1)
    amount: float = Field(ge=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: Optional[dt.date] = None
    description: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    title: str
    amount: float
    category: ExpenseCategory
    date: dt.date
    description: Optional[str] = None

    model_config = {"from_attributes": True}
