"""Shared schema types."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

Source = Literal["inventory", "prep"]


def reject_null(value):
    """Partial updates may omit a required column but never clear it."""
    if value is None:
        raise ValueError("may not be null")
    return value


class RecipeLineIn(BaseModel):
    """A recipe line as sent by clients."""

    item_id: str
    source: Source = "inventory"
    amount: float = Field(gt=0)
    unit: str


class RecipeLineResponse(BaseModel):
    id: str
    item_id: str
    source: Source
    amount: float
    unit: str
    position: int

    model_config = {"from_attributes": True}


class LineCostResponse(BaseModel):
    """One recipe line resolved against current catalog costs."""

    item_id: str
    source: Source
    name: Optional[str] = None
    amount: float
    unit: str
    converted_amount: float
    catalog_unit: Optional[str] = None
    cost: float
    missing: bool = False

    model_config = {"from_attributes": True}
