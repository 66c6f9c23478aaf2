"""Supplier routes."""

from fastapi import APIRouter, HTTPException, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession, unit_of_work
from restops.models.inventory import Ingredient, Supplier
from restops.schemas.inventory import SupplierCreate, SupplierResponse, SupplierUpdate
from restops.services.audit_service import log_action

router = APIRouter()


def _get_supplier(db, supplier_id: str) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.get("/", response_model=list[SupplierResponse])
@limiter.limit("60/minute")
def list_suppliers(request: Request, db: DbSession):
    """List all suppliers."""
    return db.query(Supplier).order_by(Supplier.name).limit(500).all()


@router.post("/", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_supplier(request: Request, data: SupplierCreate, db: DbSession):
    """Create a new supplier."""
    with unit_of_work(db):
        supplier = Supplier(**data.model_dump())
        db.add(supplier)
        log_action(db, "CREATE", "SUPPLIER", f"Created supplier: {supplier.name}")
    db.refresh(supplier)
    return supplier


@router.get("/{supplier_id}", response_model=SupplierResponse)
@limiter.limit("60/minute")
def get_supplier(request: Request, supplier_id: str, db: DbSession):
    return _get_supplier(db, supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
@limiter.limit("30/minute")
def update_supplier(request: Request, supplier_id: str, data: SupplierUpdate, db: DbSession):
    supplier = _get_supplier(db, supplier_id)
    with unit_of_work(db):
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(supplier, key, value)
        log_action(db, "UPDATE", "SUPPLIER", f"Updated supplier: {supplier.name}")
    db.refresh(supplier)
    return supplier


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_supplier(request: Request, supplier_id: str, db: DbSession):
    """Delete a supplier. Its ingredients are kept and unlinked."""
    supplier = _get_supplier(db, supplier_id)
    with unit_of_work(db):
        for ingredient in db.query(Ingredient).filter(Ingredient.supplier_id == supplier.id):
            ingredient.supplier_id = None
        log_action(db, "DELETE", "SUPPLIER", f"Deleted supplier: {supplier.name}")
        db.delete(supplier)
