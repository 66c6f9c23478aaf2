"""Generative-AI advisor routes.

None of these write to the database. Extractions come back for review and
are persisted through ``/invoices/confirm-extracted`` and ``/pos/import``.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from restops.core.rate_limit import limiter
from restops.costing import reports
from restops.db.session import DbSession
from restops.models.expense import Expense
from restops.models.inventory import Ingredient, Supplier, WasteRecord
from restops.models.menu import MenuItem
from restops.models.prep import PrepTask
from restops.models.sale import Sale
from restops.schemas.ai import (
    AskRequest,
    AskResponse,
    GeneratedRecipe,
    InvoiceExtractionResponse,
    PrepForecast,
    ProcessedSalesData,
    ProcurementForecast,
    RecipeAnalysisResponse,
)
from restops.services.ai.gemini_client import GeminiClient, get_gemini_client
from restops.services.catalog import inventory_map, prep_map
from restops.services.invoice_service import match_extracted_items
from restops.services.menu_service import MenuService
from restops.services.spreadsheet import to_csv_text

logger = logging.getLogger(__name__)

router = APIRouter()

Gemini = Annotated[GeminiClient, Depends(get_gemini_client)]

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/heic"}
FORECAST_WINDOW_DAYS = 30


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    return content


def _business_context(db) -> dict:
    """Snapshot of the numbers the advisor is allowed to reason about."""
    inventory = db.query(Ingredient).order_by(Ingredient.name).all()
    menu = db.query(MenuItem).all()
    sales = db.query(Sale).all()
    pnl = reports.profit_and_loss(sales, db.query(Expense).all(), db.query(WasteRecord).all())
    return {
        "profitAndLoss": {
            "revenue": pnl.revenue,
            "cogs": pnl.cogs,
            "wasteLoss": pnl.waste_loss,
            "operatingExpenses": pnl.operating_expenses,
            "netProfit": pnl.net_profit,
        },
        "inventory": [
            {"name": i.name, "stock": i.current_stock, "unit": i.unit, "costPerUnit": i.cost_per_unit}
            for i in inventory
        ],
        "lowStock": [i.name for i in reports.low_stock(inventory)],
        "menu": [
            {"name": m.name, "price": m.price, "cost": m.cost, "marginPercent": m.margin_percent}
            for m in reports.menu_margins(menu, inventory_map(db), prep_map(db))
        ],
        "salesCount": len(sales),
    }


def _recent_sales(db) -> list:
    """Per-sale timestamp and line count over the forecast window."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=FORECAST_WINDOW_DAYS)
    sales = db.query(Sale).filter(Sale.timestamp >= cutoff).order_by(Sale.timestamp).all()
    return [
        {"timestamp": s.timestamp.isoformat(), "items": sum(line.quantity for line in s.items)}
        for s in sales
    ]


@router.post("/ask", response_model=AskResponse)
@limiter.limit("10/minute")
async def ask(request: Request, data: AskRequest, db: DbSession, client: Gemini):
    """Free-text question answered from current business data."""
    answer = await client.ask(data.question, _business_context(db))
    return {"answer": answer}


@router.post("/recipe-suggestion", response_model=GeneratedRecipe)
@limiter.limit("10/minute")
async def recipe_suggestion(request: Request, db: DbSession, client: Gemini):
    """Suggest a daily special built around the best-stocked ingredients."""
    inventory = (
        db.query(Ingredient)
        .filter(Ingredient.current_stock > 0)
        .order_by(Ingredient.current_stock.desc())
        .limit(30)
        .all()
    )
    if not inventory:
        raise HTTPException(status_code=400, detail="No ingredients in stock")
    return await client.suggest_recipe(
        [{"name": i.name, "stock": i.current_stock, "unit": i.unit} for i in inventory]
    )


@router.post("/invoice-extract", response_model=InvoiceExtractionResponse)
@limiter.limit("10/minute")
async def invoice_extract(
    request: Request,
    db: DbSession,
    client: Gemini,
    file: UploadFile = File(...),
):
    """Read an invoice photo and match its lines to existing ingredients."""
    mime_type = file.content_type or "image/jpeg"
    if mime_type not in IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {mime_type}")
    content = await _read_upload(file)

    inventory = db.query(Ingredient).order_by(Ingredient.name).all()
    extracted = await client.extract_invoice(content, mime_type, [i.name for i in inventory])
    matched = match_extracted_items(extracted.items, inventory)
    logger.info(
        "Extracted %d invoice lines, %d new",
        len(matched), sum(1 for m in matched if m.is_new),
    )
    return {"invoice_date": extracted.invoice_date, "items": matched}


@router.post("/sales-sheet", response_model=ProcessedSalesData)
@limiter.limit("5/minute")
async def sales_sheet(
    request: Request,
    db: DbSession,
    client: Gemini,
    file: UploadFile = File(...),
):
    """Parse an exported sales sheet (xlsx or csv) into rows ready for ``/pos/import``."""
    content = await _read_upload(file)
    csv_text = to_csv_text(file.filename, content)
    menu = [{"name": m.name, "price": m.price} for m in db.query(MenuItem).all()]
    return await client.process_sales_sheet(csv_text, menu)


@router.post("/menu/{item_id}/analysis", response_model=RecipeAnalysisResponse)
@limiter.limit("10/minute")
async def recipe_analysis(request: Request, item_id: str, db: DbSession, client: Gemini):
    """Improvement advice for one menu item's recipe, costed at current prices."""
    service = MenuService(db)
    costed = service.costed([service.get(item_id)])[0]
    item = {
        "name": costed["name"],
        "price": costed["price"],
        "cost": costed["cost"],
        "marginPercent": costed["margin_percent"],
        "recipe": [
            {"name": row["name"], "amount": row["amount"], "unit": row["unit"], "cost": row["cost"]}
            for row in costed["breakdown"]
        ],
    }
    inventory = [
        {"name": i.name, "stock": i.current_stock, "unit": i.unit, "costPerUnit": i.cost_per_unit}
        for i in db.query(Ingredient).order_by(Ingredient.name).all()
    ]
    analysis = await client.analyze_recipe(item, inventory)
    return {"menu_item_id": item_id, "analysis": analysis}


@router.post("/procurement-forecast", response_model=ProcurementForecast)
@limiter.limit("5/minute")
async def procurement_forecast(request: Request, db: DbSession, client: Gemini):
    """Seven-day shopping list from recent sales. See ``/reports/order-list`` for the rule-based list."""
    inventory = db.query(Ingredient).order_by(Ingredient.name).all()
    if not inventory:
        raise HTTPException(status_code=400, detail="Inventory is empty")
    return await client.forecast_procurement(
        _recent_sales(db),
        [
            {"id": i.id, "name": i.name, "stock": i.current_stock, "unit": i.unit,
             "minThreshold": i.min_threshold, "supplierId": i.supplier_id}
            for i in inventory
        ],
        [{"id": s.id, "name": s.name, "category": s.category} for s in db.query(Supplier).all()],
    )


@router.post("/prep-forecast", response_model=PrepForecast)
@limiter.limit("5/minute")
async def prep_forecast(request: Request, db: DbSession, client: Gemini):
    """Prioritised prep list for tomorrow."""
    tasks = db.query(PrepTask).order_by(PrepTask.station, PrepTask.item).all()
    if not tasks:
        raise HTTPException(status_code=400, detail="No prep tasks defined")
    return await client.forecast_prep(
        _recent_sales(db),
        [
            {"id": t.id, "name": t.item, "unit": t.unit, "onHand": t.on_hand, "parLevel": t.par_level}
            for t in tasks
        ],
    )
