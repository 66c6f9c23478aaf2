"""Shift routes: open, live Z-report and close."""

from fastapi import APIRouter, HTTPException, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession
from restops.schemas.sale import ShiftClose, ShiftOpen, ShiftResponse
from restops.services.shift_service import ShiftService

router = APIRouter()


@router.get("/", response_model=list[ShiftResponse])
@limiter.limit("60/minute")
def list_shifts(request: Request, db: DbSession):
    return ShiftService(db).history()


@router.get("/current", response_model=ShiftResponse)
@limiter.limit("120/minute")
def current_shift(request: Request, db: DbSession):
    shift = ShiftService(db).current()
    if shift is None:
        raise HTTPException(status_code=404, detail="No open shift")
    return shift


@router.post("/open", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def open_shift(request: Request, data: ShiftOpen, db: DbSession):
    return ShiftService(db).open(data.starting_cash, data.operator_name)


@router.get("/{shift_id}/summary")
@limiter.limit("60/minute")
def shift_summary(request: Request, shift_id: str, db: DbSession):
    """Running totals for a shift, before the cash is counted."""
    service = ShiftService(db)
    shift = service.get(shift_id)
    totals = service.summary(shift)
    return {
        "shift_id": shift.id,
        "starting_cash": shift.starting_cash,
        "cash_sales": totals.cash_sales,
        "card_sales": totals.card_sales,
        "online_sales": totals.online_sales,
        "total_sales": totals.total_sales,
        "expected_cash": totals.expected_cash,
    }


@router.post("/{shift_id}/close", response_model=ShiftResponse)
@limiter.limit("10/minute")
def close_shift(request: Request, shift_id: str, data: ShiftClose, db: DbSession):
    """Close the shift and record the discrepancy between counted and expected cash."""
    return ShiftService(db).close(shift_id, data.actual_cash, bank_deposit=data.bank_deposit)
