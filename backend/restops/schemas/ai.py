"""Generative-AI request and response schemas.

The response models double as the decoding step for model output: whatever
text comes back must validate against them or the call fails.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts the camelCase keys the model is prompted to emit."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AskRequest(BaseModel):
    question: str = Field(min_length=1)


class AskResponse(BaseModel):
    answer: str


class SuggestedIngredient(_CamelModel):
    name: str
    amount: float
    unit: str


class GeneratedRecipe(_CamelModel):
    name: str
    description: str = ""
    category: str = ""
    suggested_price: float = 0
    ingredients: List[SuggestedIngredient] = []
    reasoning: Optional[str] = None


class ExtractedInvoiceItem(_CamelModel):
    name: str
    quantity: float
    unit: str
    cost_per_unit: float


class ExtractedInvoice(_CamelModel):
    invoice_date: Optional[str] = None
    items: List[ExtractedInvoiceItem] = []


class MatchedInvoiceItem(BaseModel):
    """An extracted line after matching against current inventory names."""

    name: str
    quantity: float
    unit: str
    cost_per_unit: float
    is_new: bool
    matched_id: Optional[str] = None


class InvoiceExtractionResponse(BaseModel):
    invoice_date: Optional[str] = None
    items: List[MatchedInvoiceItem]


class InvoiceConfirmRequest(BaseModel):
    """Reviewed extraction, confirmed by the user."""

    invoice_date: Optional[str] = None
    supplier_id: Optional[str] = None
    items: List[MatchedInvoiceItem] = Field(min_length=1)


class ProcessedSaleRow(_CamelModel):
    item_name: str
    quantity: float
    price_per_item: float


class NewItemRow(_CamelModel):
    name: str
    price: float
    category: str = "general"


class ProcessedSalesData(_CamelModel):
    processed_sales: List[ProcessedSaleRow] = []
    new_items_found: List[NewItemRow] = []


class SalesImportRequest(_CamelModel):
    """Reviewed spreadsheet rows confirmed for import.

    Takes the same shape the sales-sheet extraction returns, plus the
    currency the sheet was priced in.
    """

    processed_sales: List[ProcessedSaleRow]
    new_items_found: List[NewItemRow] = []
    currency: Literal["toman", "rial"] = "toman"


class RecipeAnalysisResponse(BaseModel):
    menu_item_id: str
    analysis: str


class ForecastOrderItem(_CamelModel):
    item_id: str
    item_name: str
    quantity_to_order: float = Field(ge=0)
    current_stock: float
    unit: str


class ForecastSupplierOrder(_CamelModel):
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    items: List[ForecastOrderItem] = []


class ProcurementForecast(_CamelModel):
    """Seven-day shopping list proposed from recent sales and current stock."""

    orders: List[ForecastSupplierOrder] = []
    no_supplier_items: List[ForecastOrderItem] = []


class PrepForecastTask(_CamelModel):
    prep_task_id: str
    prep_task_name: str
    quantity_to_prep: float = Field(ge=0)
    priority: Literal["high", "medium", "low"]
    reasoning: str = ""


class PrepForecast(_CamelModel):
    """Prioritised prep list for the next service."""

    summary: str = ""
    tasks: List[PrepForecastTask] = []
