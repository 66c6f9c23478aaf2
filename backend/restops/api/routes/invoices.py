"""Purchase invoice routes."""

from typing import Optional

from fastapi import APIRouter, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession
from restops.schemas.ai import InvoiceConfirmRequest
from restops.schemas.invoice import InvoiceCreate, InvoiceResponse
from restops.services.invoice_service import InvoiceService

router = APIRouter()


@router.get("/", response_model=list[InvoiceResponse])
@limiter.limit("60/minute")
def list_invoices(request: Request, db: DbSession, status_filter: Optional[str] = None):
    return InvoiceService(db).list_invoices(status_filter)


@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_invoice(request: Request, data: InvoiceCreate, db: DbSession):
    """Record a manual invoice and receive its lines into stock."""
    return InvoiceService(db).create(
        data.lines,
        supplier_id=data.supplier_id,
        invoice_number=data.invoice_number,
        invoice_date=data.invoice_date,
        status=data.status.value,
    )


@router.post("/confirm-extracted", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def confirm_extracted_invoice(request: Request, data: InvoiceConfirmRequest, db: DbSession):
    """Persist a reviewed AI invoice extraction."""
    return InvoiceService(db).confirm_extracted(
        data.items, invoice_date=data.invoice_date, supplier_id=data.supplier_id
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
@limiter.limit("60/minute")
def get_invoice(request: Request, invoice_id: str, db: DbSession):
    return InvoiceService(db).get(invoice_id)


@router.post("/{invoice_id}/pay", response_model=InvoiceResponse)
@limiter.limit("30/minute")
def mark_invoice_paid(request: Request, invoice_id: str, db: DbSession):
    return InvoiceService(db).mark_paid(invoice_id)
