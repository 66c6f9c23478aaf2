"""Menu schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from restops.schemas.common import LineCostResponse, RecipeLineIn, RecipeLineResponse, reject_null


class MenuItemBase(BaseModel):
    name: str = Field(min_length=1)
    category: str = "general"
    price: float = Field(ge=0)
    image_url: Optional[str] = None


class MenuItemCreate(MenuItemBase):
    recipe: List[RecipeLineIn] = []


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    recipe: Optional[List[RecipeLineIn]] = None

    @field_validator("name", "category", "price")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)


class MenuItemResponse(MenuItemBase):
    """Menu item with its cost computed from current ingredient prices."""

    id: str
    recipe: List[RecipeLineResponse] = []
    cost: float = 0
    margin: float = 0
    margin_percent: float = 0
    breakdown: List[LineCostResponse] = []

    model_config = {"from_attributes": True}
