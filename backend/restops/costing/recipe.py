"""Recipe cost calculator.

A recipe is a list of lines, each pointing at an inventory ingredient or a
prep task by id. Lines and catalog entries are duck-typed: ORM rows and the
dataclasses below both work.

- line: ``item_id``, ``amount``, ``unit``, ``source`` ("inventory" | "prep")
- catalog entry: ``cost_per_unit``, ``unit`` (and ``name``/``item`` for breakdowns)

Missing references cost nothing rather than failing, so a recipe with a
dangling ingredient silently under-reports its cost.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from restops.costing.units import resolve_conversion_factor

SOURCE_INVENTORY = "inventory"
SOURCE_PREP = "prep"


@dataclass(frozen=True)
class RecipeLine:
    item_id: str
    amount: float
    unit: str
    source: str = SOURCE_INVENTORY


@dataclass(frozen=True)
class LineCost:
    """One resolved recipe line, for per-ingredient breakdowns."""

    item_id: str
    source: str
    name: Optional[str]
    amount: float
    unit: str
    converted_amount: float
    catalog_unit: Optional[str]
    cost: float

    @property
    def missing(self) -> bool:
        return self.name is None


def is_prep(line: Any) -> bool:
    return getattr(line, "source", None) == SOURCE_PREP


def resolve_source(line: Any, inventory: Mapping[str, Any], prep_catalog: Mapping[str, Any]):
    """Return the catalog entry a line points at, or None if it is gone."""
    catalog = prep_catalog if is_prep(line) else inventory
    return catalog.get(line.item_id)


def line_cost(line: Any, inventory: Mapping[str, Any], prep_catalog: Mapping[str, Any]) -> float:
    """Cost contribution of a single recipe line."""
    entry = resolve_source(line, inventory, prep_catalog)
    if entry is None:
        return 0.0
    cost_per_unit = entry.cost_per_unit
    if is_prep(line) and not cost_per_unit:
        return 0.0
    factor = resolve_conversion_factor(line.unit, entry.unit)
    return (cost_per_unit or 0.0) * line.amount * factor


def recipe_cost(
    lines: Iterable[Any],
    inventory: Mapping[str, Any],
    prep_catalog: Optional[Mapping[str, Any]] = None,
) -> float:
    """Total cost of a recipe at current catalog costs, unrounded."""
    prep_catalog = prep_catalog or {}
    return sum((line_cost(line, inventory, prep_catalog) for line in lines), 0.0)


def recipe_breakdown(
    lines: Iterable[Any],
    inventory: Mapping[str, Any],
    prep_catalog: Optional[Mapping[str, Any]] = None,
) -> List[LineCost]:
    prep_catalog = prep_catalog or {}
    rows = []
    for line in lines:
        entry = resolve_source(line, inventory, prep_catalog)
        source = SOURCE_PREP if is_prep(line) else SOURCE_INVENTORY
        if entry is None:
            rows.append(LineCost(
                item_id=line.item_id, source=source, name=None, amount=line.amount,
                unit=line.unit, converted_amount=line.amount, catalog_unit=None, cost=0.0,
            ))
            continue
        factor = resolve_conversion_factor(line.unit, entry.unit)
        rows.append(LineCost(
            item_id=line.item_id,
            source=source,
            name=getattr(entry, "name", None) or getattr(entry, "item", None) or "",
            amount=line.amount,
            unit=line.unit,
            converted_amount=line.amount * factor,
            catalog_unit=entry.unit,
            cost=line_cost(line, inventory, prep_catalog),
        ))
    return rows
