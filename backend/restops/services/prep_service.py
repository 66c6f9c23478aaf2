"""Kitchen prep service: par levels, prep recipes and batch production."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from restops.costing.errors import InvalidQuantity
from restops.costing.production import ProductionPlan, deduct, plan_production, prep_unit_cost
from restops.db.session import unit_of_work
from restops.models.prep import PrepRecipeLine, PrepTask
from restops.schemas.common import RecipeLineIn
from restops.services.audit_service import log_action
from restops.services.catalog import inventory_map, prep_map
from restops.services.errors import NotFoundError, ValidationError, require_values

logger = logging.getLogger(__name__)


class PrepService:
    """Service for mise en place tasks."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, task_id: str) -> PrepTask:
        task = self.db.get(PrepTask, task_id)
        if task is None:
            raise NotFoundError("Prep task", task_id)
        return task

    def list_tasks(self, station: Optional[str] = None) -> List[PrepTask]:
        query = self.db.query(PrepTask)
        if station:
            query = query.filter(PrepTask.station == station)
        return query.order_by(PrepTask.station, PrepTask.item).all()

    def create(
        self,
        item: str,
        par_level: float,
        unit: str,
        station: str = "prep",
        on_hand: float = 0,
        batch_size: Optional[float] = None,
    ) -> PrepTask:
        if par_level <= 0:
            raise InvalidQuantity("Par level", par_level)
        with unit_of_work(self.db):
            task = PrepTask(
                item=item,
                station=station,
                par_level=par_level,
                on_hand=on_hand,
                unit=unit,
                batch_size=batch_size,
            )
            self.db.add(task)
            log_action(self.db, "CREATE", "PREP", f"Created prep item: {item}")
        self.db.refresh(task)
        return task

    def update(self, task_id: str, version: Optional[int] = None, **changes) -> PrepTask:
        task = self.get(task_id)
        task.check_version(version)
        require_values(changes, ("item", "station", "par_level", "unit"))
        if "par_level" in changes and changes["par_level"] <= 0:
            raise InvalidQuantity("Par level", changes["par_level"])
        with unit_of_work(self.db):
            for key, value in changes.items():
                setattr(task, key, value)
            if task.recipe and ("batch_size" in changes or "unit" in changes):
                task.cost_per_unit = prep_unit_cost(
                    task.recipe, task.batch_size, inventory_map(self.db), prep_map(self.db)
                )
            log_action(self.db, "UPDATE", "PREP", f"Updated prep item: {task.item}")
        self.db.refresh(task)
        return task

    def delete(self, task_id: str) -> None:
        task = self.get(task_id)
        with unit_of_work(self.db):
            log_action(self.db, "DELETE", "PREP", f"Deleted prep item: {task.item}")
            self.db.delete(task)

    def adjust_on_hand(self, task_id: str, delta: float) -> PrepTask:
        """Manual count correction, clamped at zero."""
        task = self.get(task_id)
        with unit_of_work(self.db):
            task.on_hand = max(0.0, task.on_hand + delta)
        self.db.refresh(task)
        return task

    def save_recipe(
        self,
        task_id: str,
        lines: Sequence[RecipeLineIn],
        batch_size: Optional[float] = None,
    ) -> PrepTask:
        """Replace a task's recipe and recompute its unit cost.

        Prep recipes draw only on raw inventory.
        """
        task = self.get(task_id)
        if any(line.source != "inventory" for line in lines):
            raise ValidationError("Prep recipes may only use inventory ingredients")

        with unit_of_work(self.db):
            if batch_size is not None:
                task.batch_size = batch_size
            task.recipe = [
                PrepRecipeLine(
                    item_id=line.item_id,
                    source=line.source,
                    amount=line.amount,
                    unit=line.unit,
                    position=pos,
                )
                for pos, line in enumerate(lines)
            ]
            task.cost_per_unit = prep_unit_cost(
                task.recipe, task.batch_size, inventory_map(self.db), prep_map(self.db)
            )
            log_action(self.db, "UPDATE", "PREP", f"Updated recipe for: {task.item}")
        self.db.refresh(task)
        return task

    def produce(self, task_id: str, batches: float) -> ProductionPlan:
        """Cook ``batches`` batches: consume raw stock and credit on-hand.

        The whole deduction map is computed before anything is written.
        """
        if batches <= 0:
            raise InvalidQuantity("Batches to produce", batches)
        task = self.get(task_id)
        inventory = inventory_map(self.db)
        plan = plan_production(task.recipe, task.batch_size, batches, inventory)

        with unit_of_work(self.db):
            for ingredient_id, amount in plan.inventory_deductions.items():
                ingredient = inventory[ingredient_id]
                ingredient.current_stock = deduct(ingredient.current_stock, amount)
            task.on_hand = task.on_hand + plan.on_hand_delta
            log_action(
                self.db, "PRODUCE", "PREP",
                f"Produced {batches} batch(es) of {task.item} (+{plan.on_hand_delta} {task.unit})",
            )
        logger.info("Produced %s x %s, deducted %s", batches, task.item, plan.inventory_deductions)
        self.db.refresh(task)
        return plan
