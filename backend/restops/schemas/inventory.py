"""Inventory, supplier and waste schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from restops.schemas.common import Source, reject_null


class SupplierBase(BaseModel):
    """Base supplier schema."""

    name: str = Field(min_length=1)
    category: Optional[str] = None
    phone_number: Optional[str] = None


class SupplierCreate(SupplierBase):
    """Supplier creation schema."""

    pass


class SupplierUpdate(BaseModel):
    """Supplier update schema."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        return reject_null(value)


class SupplierResponse(SupplierBase):
    """Supplier response schema."""

    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PurchaseLotResponse(BaseModel):
    id: str
    date: datetime
    quantity: float
    cost_per_unit: float

    model_config = {"from_attributes": True}


class IngredientCreate(BaseModel):
    """New ingredient; the opening stock is recorded as its first purchase lot."""

    name: str = Field(min_length=1)
    unit: str = "kg"
    current_stock: float = Field(default=0, ge=0)
    cost_per_unit: float = Field(default=0, ge=0)
    min_threshold: float = Field(default=0, ge=0)
    supplier_id: Optional[str] = None


class IngredientUpdate(BaseModel):
    """Descriptive edits. Stock and cost corrections go through ``/adjust``."""

    name: Optional[str] = Field(default=None, min_length=1)
    unit: Optional[str] = None
    min_threshold: Optional[float] = Field(default=None, ge=0)
    supplier_id: Optional[str] = None
    version: Optional[int] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "unit", "min_threshold")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)


class IngredientAdjust(BaseModel):
    """Stock count correction with an optional unit cost override.

    The resulting stock never drops below zero.
    """

    delta: float = 0
    cost_per_unit: Optional[float] = Field(default=None, ge=0)
    reason: Optional[str] = None
    version: Optional[int] = None


class IngredientResponse(BaseModel):
    id: str
    name: str
    unit: str
    current_stock: float
    cost_per_unit: float
    min_threshold: float
    supplier_id: Optional[str] = None
    version: int
    purchase_history: List[PurchaseLotResponse] = []

    model_config = {"from_attributes": True}


class PurchaseReceive(BaseModel):
    """Stock received for an existing ingredient."""

    quantity: float = Field(gt=0)
    cost_per_unit: float = Field(ge=0)
    date: Optional[datetime] = None


class WasteCreate(BaseModel):
    item_id: str
    source: Source = "inventory"
    amount: float
    reason: Optional[str] = None


class WasteResponse(BaseModel):
    id: str
    item_id: str
    item_name: str
    item_source: Source
    amount: float
    unit: str
    cost_loss: float
    reason: Optional[str] = None
    date: datetime

    model_config = {"from_attributes": True}
