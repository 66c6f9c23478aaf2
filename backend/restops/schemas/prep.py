"""Kitchen prep schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from restops.schemas.common import RecipeLineIn, RecipeLineResponse, reject_null


class PrepTaskCreate(BaseModel):
    item: str = Field(min_length=1)
    station: str = "prep"
    par_level: float
    unit: str = "kg"
    on_hand: float = Field(default=0, ge=0)
    batch_size: Optional[float] = Field(default=None, gt=0)


class PrepTaskUpdate(BaseModel):
    """Partial edit. ``batch_size: null`` clears the batch size."""

    item: Optional[str] = Field(default=None, min_length=1)
    station: Optional[str] = None
    par_level: Optional[float] = None
    unit: Optional[str] = None
    batch_size: Optional[float] = Field(default=None, gt=0)
    version: Optional[int] = None

    @field_validator("item", "station", "par_level", "unit")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)


class PrepAdjust(BaseModel):
    """Manual on-hand correction; the result never drops below zero."""

    delta: float


class PrepRecipeSave(BaseModel):
    lines: List[RecipeLineIn]
    batch_size: Optional[float] = Field(default=None, gt=0)


class ProduceRequest(BaseModel):
    batches: float


class PrepTaskResponse(BaseModel):
    id: str
    item: str
    station: str
    par_level: float
    on_hand: float
    unit: str
    batch_size: Optional[float] = None
    cost_per_unit: Optional[float] = None
    version: int
    recipe: List[RecipeLineResponse] = []

    model_config = {"from_attributes": True}


class ProductionResponse(BaseModel):
    """Outcome of a production run."""

    task: PrepTaskResponse
    batches: float
    produced: float
    inventory_deductions: dict[str, float]
