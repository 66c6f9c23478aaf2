"""Kitchen prep routes."""

from typing import Optional

from fastapi import APIRouter, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession
from restops.schemas.prep import (
    PrepAdjust,
    PrepRecipeSave,
    PrepTaskCreate,
    PrepTaskResponse,
    PrepTaskUpdate,
    ProduceRequest,
    ProductionResponse,
)
from restops.services.prep_service import PrepService

router = APIRouter()


@router.get("/", response_model=list[PrepTaskResponse])
@limiter.limit("60/minute")
def list_prep_tasks(request: Request, db: DbSession, station: Optional[str] = None):
    return PrepService(db).list_tasks(station)


@router.post("/", response_model=PrepTaskResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_prep_task(request: Request, db: DbSession, data: PrepTaskCreate):
    return PrepService(db).create(**data.model_dump())


@router.get("/{task_id}", response_model=PrepTaskResponse)
@limiter.limit("60/minute")
def get_prep_task(request: Request, task_id: str, db: DbSession):
    return PrepService(db).get(task_id)


@router.put("/{task_id}", response_model=PrepTaskResponse)
@limiter.limit("30/minute")
def update_prep_task(request: Request, task_id: str, data: PrepTaskUpdate, db: DbSession):
    changes = data.model_dump(exclude_unset=True)
    version = changes.pop("version", None)
    return PrepService(db).update(task_id, version=version, **changes)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_prep_task(request: Request, task_id: str, db: DbSession):
    PrepService(db).delete(task_id)


@router.post("/{task_id}/adjust", response_model=PrepTaskResponse)
@limiter.limit("60/minute")
def adjust_on_hand(request: Request, task_id: str, data: PrepAdjust, db: DbSession):
    """Correct the on-hand count by a signed delta."""
    return PrepService(db).adjust_on_hand(task_id, data.delta)


@router.put("/{task_id}/recipe", response_model=PrepTaskResponse)
@limiter.limit("30/minute")
def save_prep_recipe(request: Request, task_id: str, data: PrepRecipeSave, db: DbSession):
    """Replace the recipe and recompute the unit cost."""
    return PrepService(db).save_recipe(task_id, data.lines, batch_size=data.batch_size)


@router.post("/{task_id}/produce", response_model=ProductionResponse)
@limiter.limit("30/minute")
def produce(request: Request, task_id: str, data: ProduceRequest, db: DbSession):
    """Cook batches: deduct raw ingredients and add to on-hand."""
    service = PrepService(db)
    plan = service.produce(task_id, data.batches)
    return {
        "task": PrepTaskResponse.model_validate(service.get(task_id)),
        "batches": data.batches,
        "produced": plan.on_hand_delta,
        "inventory_deductions": plan.inventory_deductions,
    }
