"""Inventory routes: ingredients, purchases and waste."""

from typing import Optional

from fastapi import APIRouter, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession
from restops.schemas.inventory import (
    IngredientAdjust,
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    PurchaseReceive,
    WasteCreate,
    WasteResponse,
)
from restops.services.inventory_service import InventoryService

router = APIRouter()


@router.get("/", response_model=list[IngredientResponse])
@limiter.limit("60/minute")
def list_ingredients(request: Request, db: DbSession, search: Optional[str] = None):
    """List ingredients, optionally filtered by name."""
    return InventoryService(db).list_items(search)


@router.post("/", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_ingredient(request: Request, db: DbSession, data: IngredientCreate):
    """Create an ingredient with its opening stock as the first purchase lot."""
    return InventoryService(db).create(**data.model_dump())


# Waste routes are registered before /{ingredient_id} so the path is not captured.

@router.get("/waste", response_model=list[WasteResponse])
@limiter.limit("60/minute")
def list_waste(request: Request, db: DbSession):
    return InventoryService(db).list_waste()


@router.post("/waste", response_model=WasteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def record_waste(request: Request, db: DbSession, data: WasteCreate):
    """Write off spoiled stock from an ingredient or a prep item."""
    return InventoryService(db).record_waste(
        data.item_id, data.amount, source=data.source, reason=data.reason
    )


@router.get("/{ingredient_id}", response_model=IngredientResponse)
@limiter.limit("60/minute")
def get_ingredient(request: Request, ingredient_id: str, db: DbSession):
    return InventoryService(db).get(ingredient_id)


@router.put("/{ingredient_id}", response_model=IngredientResponse)
@limiter.limit("30/minute")
def update_ingredient(request: Request, ingredient_id: str, data: IngredientUpdate, db: DbSession):
    changes = data.model_dump(exclude_unset=True)
    version = changes.pop("version", None)
    return InventoryService(db).update(ingredient_id, version=version, **changes)


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_ingredient(request: Request, ingredient_id: str, db: DbSession):
    InventoryService(db).delete(ingredient_id)


@router.post("/{ingredient_id}/purchases", response_model=IngredientResponse)
@limiter.limit("30/minute")
def receive_purchase(request: Request, ingredient_id: str, data: PurchaseReceive, db: DbSession):
    """Receive stock and re-average the unit cost."""
    return InventoryService(db).receive_purchase(
        ingredient_id, data.quantity, data.cost_per_unit, date=data.date
    )


@router.post("/{ingredient_id}/adjust", response_model=IngredientResponse)
@limiter.limit("30/minute")
def adjust_stock(request: Request, ingredient_id: str, data: IngredientAdjust, db: DbSession):
    """Correct the counted stock by a signed delta, optionally resetting the unit cost."""
    return InventoryService(db).adjust_stock(
        ingredient_id,
        delta=data.delta,
        cost_per_unit=data.cost_per_unit,
        reason=data.reason,
        version=data.version,
    )
