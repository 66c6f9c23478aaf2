"""Management reports: P&L, menu engineering, stock and prep status."""

from fastapi import APIRouter, Query, Request

from restops.core.rate_limit import limiter
from restops.core.responses import paginated_response
from restops.costing import reports
from restops.db.session import DbSession
from restops.models.audit import AuditLog
from restops.models.expense import Expense
from restops.models.inventory import Ingredient, Supplier, WasteRecord
from restops.models.menu import MenuItem
from restops.models.prep import PrepTask
from restops.models.sale import Sale
from restops.schemas.report import (
    DashboardResponse,
    LowStockResponse,
    MenuClassificationResponse,
    MenuMarginResponse,
    OrderListResponse,
    PrepBoardResponse,
    ProfitAndLossResponse,
)
from restops.services.audit_service import recent_entries
from restops.services.catalog import inventory_map, prep_map

router = APIRouter()


def _margins(db):
    return reports.menu_margins(db.query(MenuItem).all(), inventory_map(db), prep_map(db))


@router.get("/pnl", response_model=ProfitAndLossResponse)
@limiter.limit("30/minute")
def profit_and_loss(request: Request, db: DbSession):
    """Revenue, COGS, waste, OpEx and net profit over all recorded data."""
    return reports.profit_and_loss(
        db.query(Sale).all(), db.query(Expense).all(), db.query(WasteRecord).all()
    )


@router.get("/menu-margins", response_model=list[MenuMarginResponse])
@limiter.limit("30/minute")
def menu_margins(request: Request, db: DbSession):
    return _margins(db)


@router.get("/menu-engineering", response_model=list[MenuClassificationResponse])
@limiter.limit("30/minute")
def menu_engineering(request: Request, db: DbSession):
    """Star / plowhorse / puzzle / dog classification of the menu."""
    popularity = reports.item_popularity(db.query(Sale).all())
    return reports.classify_menu(_margins(db), popularity)


@router.get("/low-stock", response_model=list[LowStockResponse])
@limiter.limit("60/minute")
def low_stock(request: Request, db: DbSession):
    return reports.low_stock(db.query(Ingredient).order_by(Ingredient.name).all())


@router.get("/order-list", response_model=OrderListResponse)
@limiter.limit("30/minute")
def order_list(request: Request, db: DbSession):
    """Low-stock ingredients grouped by supplier, with suggested order quantities."""
    return reports.order_list(
        db.query(Ingredient).order_by(Ingredient.name).all(),
        db.query(Supplier).all(),
    )


@router.get("/prep-board", response_model=PrepBoardResponse)
@limiter.limit("60/minute")
def prep_board(request: Request, db: DbSession):
    tasks = db.query(PrepTask).order_by(PrepTask.station, PrepTask.item).all()
    return {
        "completion_rate": reports.completion_rate(tasks),
        "tasks": reports.prep_shortfall(tasks),
    }


@router.get("/dashboard", response_model=DashboardResponse)
@limiter.limit("30/minute")
def dashboard(request: Request, db: DbSession):
    sales = db.query(Sale).all()
    ingredients = db.query(Ingredient).all()
    menu = {m.id: m for m in db.query(MenuItem).all()}
    return {
        "profit_and_loss": reports.profit_and_loss(
            sales, db.query(Expense).all(), db.query(WasteRecord).all()
        ),
        "inventory_value": reports.inventory_value(ingredients),
        "low_stock_count": len(reports.low_stock(ingredients)),
        "items_without_recipe": sum(1 for m in menu.values() if not m.recipe),
        "top_items": [
            {
                "menu_item_id": item_id,
                "name": menu[item_id].name if item_id in menu else None,
                "units_sold": count,
            }
            for item_id, count in reports.top_items(sales)
        ],
    }


@router.get("/audit-log")
@limiter.limit("30/minute")
def audit_log(
    request: Request,
    db: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    entries, total = recent_entries(db, skip=skip, limit=limit)
    return paginated_response([
        {
            "id": e.id,
            "timestamp": e.timestamp.isoformat() if e.timestamp else None,
            "user_name": e.user_name,
            "action": e.action,
            "entity": e.entity,
            "details": e.details,
        }
        for e in entries
    ], total=total, skip=skip, limit=limit)
