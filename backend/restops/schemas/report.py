"""Report schemas. Mirror the dataclasses in ``restops.costing.reports``."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ProfitAndLossResponse(BaseModel):
    revenue: float
    cogs: float
    gross_profit: float
    waste_loss: float
    operating_expenses: float
    net_profit: float
    margin_percent: float

    model_config = {"from_attributes": True}


class MenuMarginResponse(BaseModel):
    menu_item_id: str
    name: str
    category: Optional[str] = None
    price: float
    cost: float
    margin: float
    margin_percent: float
    has_recipe: bool

    model_config = {"from_attributes": True}


class MenuClassificationResponse(BaseModel):
    menu_item_id: str
    name: str
    units_sold: float
    unit_profit: float
    category: str

    model_config = {"from_attributes": True}


class TopItemResponse(BaseModel):
    menu_item_id: str
    name: Optional[str] = None
    units_sold: float


class LowStockResponse(BaseModel):
    id: str
    name: str
    unit: str
    current_stock: float
    min_threshold: float
    supplier_id: Optional[str] = None

    model_config = {"from_attributes": True}


class PrepShortfallResponse(BaseModel):
    task_id: str
    item: str
    par_level: float
    on_hand: float
    needed: float
    progress_percent: float

    model_config = {"from_attributes": True}


class PrepBoardResponse(BaseModel):
    completion_rate: int
    tasks: List[PrepShortfallResponse]


class DashboardResponse(BaseModel):
    profit_and_loss: ProfitAndLossResponse
    inventory_value: float
    low_stock_count: int
    items_without_recipe: int
    top_items: List[TopItemResponse]


class OrderLineResponse(BaseModel):
    item_id: str
    item_name: str
    quantity_to_order: float
    current_stock: float
    unit: str

    model_config = {"from_attributes": True}


class SupplierOrderResponse(BaseModel):
    supplier_id: str
    supplier_name: str
    items: List[OrderLineResponse]

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    orders: List[SupplierOrderResponse]
    no_supplier_items: List[OrderLineResponse]

    model_config = {"from_attributes": True}
