"""Management reports built from sales, expenses, waste and catalogs.

All functions are pure: pass in rows (ORM objects or anything with the same
attributes) and get plain dataclasses back.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from restops.costing.recipe import recipe_cost

CATEGORY_STAR = "star"
CATEGORY_PLOWHORSE = "plowhorse"
CATEGORY_PUZZLE = "puzzle"
CATEGORY_DOG = "dog"
CATEGORY_OTHER = "other"

# Low items are reordered up to this multiple of their minimum threshold.
REORDER_MULTIPLE = 2


@dataclass(frozen=True)
class ProfitAndLoss:
    revenue: float
    cogs: float
    gross_profit: float
    waste_loss: float
    operating_expenses: float
    net_profit: float
    margin_percent: float


@dataclass(frozen=True)
class MenuMargin:
    menu_item_id: str
    name: str
    category: Optional[str]
    price: float
    cost: float
    margin: float
    margin_percent: float
    has_recipe: bool


@dataclass(frozen=True)
class MenuClassification:
    menu_item_id: str
    name: str
    units_sold: float
    unit_profit: float
    category: str


@dataclass(frozen=True)
class OrderLine:
    item_id: str
    item_name: str
    quantity_to_order: float
    current_stock: float
    unit: str


@dataclass(frozen=True)
class SupplierOrder:
    supplier_id: str
    supplier_name: str
    items: List[OrderLine]


@dataclass(frozen=True)
class OrderList:
    orders: List[SupplierOrder]
    no_supplier_items: List[OrderLine]


@dataclass(frozen=True)
class PrepShortfall:
    task_id: str
    item: str
    par_level: float
    on_hand: float
    needed: float
    progress_percent: float


def _counts_as_revenue(sale: Any) -> bool:
    # Voided shift sales stay in the ledger for the Z-report but bring in nothing.
    return not (sale.shift_id and sale.payment_method == "void")


def profit_and_loss(sales: Iterable[Any], expenses: Iterable[Any], waste: Iterable[Any]) -> ProfitAndLoss:
    sales = list(sales)
    revenue = sum((s.total_amount for s in sales if _counts_as_revenue(s)), 0.0)
    cogs = sum((s.total_cost for s in sales), 0.0)
    waste_loss = sum((w.cost_loss for w in waste), 0.0)
    opex = sum((e.amount for e in expenses), 0.0)

    gross = revenue - cogs
    net = gross - waste_loss - opex
    margin = round(net / revenue * 100, 1) if revenue > 0 else 0.0
    return ProfitAndLoss(
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross,
        waste_loss=waste_loss,
        operating_expenses=opex,
        net_profit=net,
        margin_percent=margin,
    )


def menu_margins(
    menu: Iterable[Any],
    inventory: Mapping[str, Any],
    prep_catalog: Optional[Mapping[str, Any]] = None,
) -> List[MenuMargin]:
    """Live cost and margin for every menu item."""
    rows = []
    for item in menu:
        recipe = list(item.recipe or [])
        cost = recipe_cost(recipe, inventory, prep_catalog)
        margin = item.price - cost
        rows.append(MenuMargin(
            menu_item_id=item.id,
            name=item.name,
            category=getattr(item, "category", None),
            price=item.price,
            cost=cost,
            margin=margin,
            margin_percent=round(margin / item.price * 100, 1) if item.price > 0 else 0.0,
            has_recipe=bool(recipe),
        ))
    return rows


def item_popularity(sales: Iterable[Any]) -> Dict[str, float]:
    """Units sold per menu item id across all sales."""
    counts: Dict[str, float] = {}
    for sale in sales:
        for line in sale.items:
            counts[line.menu_item_id] = counts.get(line.menu_item_id, 0) + line.quantity
    return counts


def top_items(sales: Iterable[Any], limit: int = 4) -> List[tuple]:
    counts = item_popularity(sales)
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def classify_menu(margins: Iterable[MenuMargin], popularity: Mapping[str, float]) -> List[MenuClassification]:
    """Menu engineering matrix.

    Items are split on the average units sold and the average unit profit of
    the items that sold at least once. Items with no sales are ``other``.
    """
    margins = list(margins)
    sold = [m for m in margins if popularity.get(m.menu_item_id, 0) > 0]
    if sold:
        avg_units = sum(popularity[m.menu_item_id] for m in sold) / len(sold)
        avg_profit = sum(m.margin for m in sold) / len(sold)
    else:
        avg_units = avg_profit = 0.0

    result = []
    for m in margins:
        units = popularity.get(m.menu_item_id, 0)
        if units <= 0:
            category = CATEGORY_OTHER
        else:
            popular = units >= avg_units
            profitable = m.margin >= avg_profit
            if popular and profitable:
                category = CATEGORY_STAR
            elif popular:
                category = CATEGORY_PLOWHORSE
            elif profitable:
                category = CATEGORY_PUZZLE
            else:
                category = CATEGORY_DOG
        result.append(MenuClassification(
            menu_item_id=m.menu_item_id,
            name=m.name,
            units_sold=units,
            unit_profit=m.margin,
            category=category,
        ))
    return result


def low_stock(inventory: Iterable[Any]) -> List[Any]:
    return [i for i in inventory if i.current_stock <= i.min_threshold]


def prep_shortfall(tasks: Iterable[Any]) -> List[PrepShortfall]:
    rows = []
    for task in tasks:
        progress = min(100.0, task.on_hand / task.par_level * 100) if task.par_level > 0 else 100.0
        rows.append(PrepShortfall(
            task_id=task.id,
            item=task.item,
            par_level=task.par_level,
            on_hand=task.on_hand,
            needed=max(0.0, task.par_level - task.on_hand),
            progress_percent=progress,
        ))
    return rows


def completion_rate(tasks: Iterable[Any]) -> int:
    """Percent of tasks at or above par. An empty station is complete."""
    tasks = list(tasks)
    if not tasks:
        return 100
    done = sum(1 for t in tasks if t.on_hand >= t.par_level)
    return round(done / len(tasks) * 100)


def inventory_value(inventory: Iterable[Any]) -> float:
    return sum((i.current_stock * i.cost_per_unit for i in inventory), 0.0)


def reorder_quantity(item: Any) -> float:
    return max(0.0, item.min_threshold * REORDER_MULTIPLE - item.current_stock)


def order_list(inventory: Iterable[Any], suppliers: Iterable[Any]) -> OrderList:
    """Shopping list of low-stock ingredients grouped by supplier.

    Ingredients without a known supplier go to ``no_supplier_items``.
    Supplier groups are ordered by supplier name.
    """
    names = {s.id: s.name for s in suppliers}
    grouped: Dict[str, List[OrderLine]] = {}
    loose: List[OrderLine] = []
    for item in low_stock(inventory):
        line = OrderLine(
            item_id=item.id,
            item_name=item.name,
            quantity_to_order=reorder_quantity(item),
            current_stock=item.current_stock,
            unit=item.unit,
        )
        if item.supplier_id in names:
            grouped.setdefault(item.supplier_id, []).append(line)
        else:
            loose.append(line)
    orders = [
        SupplierOrder(supplier_id=sid, supplier_name=names[sid], items=lines)
        for sid, lines in sorted(grouped.items(), key=lambda kv: names[kv[0]])
    ]
    return OrderList(orders=orders, no_supplier_items=loose)
