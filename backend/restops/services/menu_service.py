"""Menu service: CRUD and live costing."""

from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from restops.costing.recipe import recipe_breakdown, recipe_cost
from restops.db.session import unit_of_work
from restops.models.menu import MenuItem, MenuRecipeLine
from restops.schemas.common import RecipeLineIn
from restops.services.audit_service import log_action
from restops.services.catalog import inventory_map, prep_map
from restops.services.errors import NotFoundError, require_values


def _recipe_rows(lines: Sequence[RecipeLineIn]) -> List[MenuRecipeLine]:
    return [
        MenuRecipeLine(
            item_id=line.item_id,
            source=line.source,
            amount=line.amount,
            unit=line.unit,
            position=pos,
        )
        for pos, line in enumerate(lines)
    ]


class MenuService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: str) -> MenuItem:
        item = self.db.get(MenuItem, item_id)
        if item is None:
            raise NotFoundError("Menu item", item_id)
        return item

    def list_items(self, category: Optional[str] = None) -> List[MenuItem]:
        query = self.db.query(MenuItem)
        if category:
            query = query.filter(MenuItem.category == category)
        return query.order_by(MenuItem.category, MenuItem.name).all()

    def find_by_name(self, name: str) -> Optional[MenuItem]:
        return self.db.query(MenuItem).filter(MenuItem.name == name).first()

    def create(
        self,
        name: str,
        price: float,
        category: str = "general",
        image_url: Optional[str] = None,
        recipe: Sequence[RecipeLineIn] = (),
    ) -> MenuItem:
        with unit_of_work(self.db):
            item = MenuItem(
                name=name,
                price=price,
                category=category,
                image_url=image_url,
                recipe=_recipe_rows(recipe),
            )
            self.db.add(item)
            log_action(self.db, "CREATE", "MENU", f"Created menu item: {name}")
        self.db.refresh(item)
        return item

    def update(self, item_id: str, recipe: Optional[Sequence[RecipeLineIn]] = None, **changes) -> MenuItem:
        require_values(changes, ("name", "category", "price"))
        item = self.get(item_id)
        with unit_of_work(self.db):
            for key, value in changes.items():
                setattr(item, key, value)
            if recipe is not None:
                item.recipe = _recipe_rows(recipe)
            log_action(self.db, "UPDATE", "MENU", f"Updated menu item: {item.name}")
        self.db.refresh(item)
        return item

    def delete(self, item_id: str) -> None:
        item = self.get(item_id)
        with unit_of_work(self.db):
            log_action(self.db, "DELETE", "MENU", f"Deleted menu item: {item.name}")
            self.db.delete(item)

    def costed(self, items: Sequence[MenuItem]) -> List[dict]:
        """Attach live cost, margin and per-line breakdown to each item."""
        inventory = inventory_map(self.db)
        prep = prep_map(self.db)
        result = []
        for item in items:
            cost = recipe_cost(item.recipe, inventory, prep)
            margin = item.price - cost
            result.append({
                "id": item.id,
                "name": item.name,
                "category": item.category,
                "price": item.price,
                "image_url": item.image_url,
                "recipe": [
                    {
                        "id": line.id,
                        "item_id": line.item_id,
                        "source": line.source,
                        "amount": line.amount,
                        "unit": line.unit,
                        "position": line.position,
                    }
                    for line in item.recipe
                ],
                "cost": cost,
                "margin": margin,
                "margin_percent": round(margin / item.price * 100, 1) if item.price > 0 else 0.0,
                "breakdown": [
                    {
                        "item_id": row.item_id,
                        "source": row.source,
                        "name": row.name,
                        "amount": row.amount,
                        "unit": row.unit,
                        "converted_amount": row.converted_amount,
                        "catalog_unit": row.catalog_unit,
                        "cost": row.cost,
                        "missing": row.missing,
                    }
                    for row in recipe_breakdown(item.recipe, inventory, prep)
                ],
            })
        return result
