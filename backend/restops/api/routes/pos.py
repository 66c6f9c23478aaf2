"""Point-of-sale routes: cart preview, checkout, sales and imports."""

from typing import Optional

from fastapi import APIRouter, Query, Request, status

from restops.core.rate_limit import limiter
from restops.core.responses import paginated_response
from restops.db.session import DbSession
from restops.schemas.ai import SalesImportRequest
from restops.schemas.sale import (
    CartPreviewResponse,
    CartRequest,
    CheckoutRequest,
    SaleResponse,
    SalesImportResponse,
    SaleStatusUpdate,
)
from restops.services.sales_service import SalesService

router = APIRouter()


def _lines(data: CartRequest):
    return [(line.menu_item_id, line.quantity) for line in data.items]


@router.post("/preview", response_model=CartPreviewResponse)
@limiter.limit("120/minute")
def preview_cart(request: Request, data: CartRequest, db: DbSession):
    """Totals for a cart without recording anything."""
    settlement = SalesService(db).preview(
        _lines(data), data.discount, data.discount_type, data.include_tax
    )
    return {
        "subtotal": settlement.subtotal,
        "discount_amount": settlement.discount_amount,
        "tax": settlement.tax,
        "total": settlement.total,
        "total_cost": settlement.total_cost,
    }


@router.post("/checkout", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
def checkout(request: Request, data: CheckoutRequest, db: DbSession):
    """Settle a cart, record the sale and deduct stock in one transaction."""
    return SalesService(db).checkout(
        _lines(data),
        payment_method=data.payment_method.value,
        discount=data.discount,
        discount_type=data.discount_type,
        include_tax=data.include_tax,
        table_number=data.table_number,
    )


@router.get("/sales")
@limiter.limit("60/minute")
def list_sales(
    request: Request,
    db: DbSession,
    shift_id: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
):
    sales, total = SalesService(db).list_sales(shift_id=shift_id, skip=skip, limit=limit)
    return paginated_response(
        [SaleResponse.model_validate(s).model_dump(mode="json") for s in sales],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/sales/{sale_id}", response_model=SaleResponse)
@limiter.limit("60/minute")
def get_sale(request: Request, sale_id: str, db: DbSession):
    return SalesService(db).get(sale_id)


@router.patch("/sales/{sale_id}/status", response_model=SaleResponse)
@limiter.limit("120/minute")
def update_sale_status(request: Request, sale_id: str, data: SaleStatusUpdate, db: DbSession):
    """Move a sale forward in the kitchen flow."""
    return SalesService(db).advance_status(sale_id, data.status.value)


@router.post("/import", response_model=SalesImportResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def import_sales(request: Request, data: SalesImportRequest, db: DbSession):
    """Commit reviewed spreadsheet sales as one delivered card sale."""
    sale, imported, skipped, created = SalesService(db).import_sales(
        data.processed_sales, data.new_items_found, currency=data.currency
    )
    return {
        "sale": SaleResponse.model_validate(sale) if sale is not None else None,
        "rows_imported": imported,
        "rows_skipped": skipped,
        "menu_items_created": created,
    }
