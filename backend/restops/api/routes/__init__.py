"""API routes."""

from fastapi import APIRouter

from restops.api.routes import (
    ai,
    expenses,
    inventory,
    invoices,
    menu,
    pos,
    prep,
    reports,
    shifts,
    suppliers,
)

api_router = APIRouter()

# Catalogs
api_router.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(prep.router, prefix="/prep", tags=["prep"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])

# Register and money
api_router.include_router(pos.router, prefix="/pos", tags=["pos"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])

# Insight
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
