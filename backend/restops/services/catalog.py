"""Id-keyed snapshots of the ingredient and prep catalogs for the calculators."""

from typing import Dict

from sqlalchemy.orm import Session

from restops.models.inventory import Ingredient
from restops.models.prep import PrepTask


def inventory_map(db: Session) -> Dict[str, Ingredient]:
    return {i.id: i for i in db.query(Ingredient).all()}


def prep_map(db: Session) -> Dict[str, PrepTask]:
    return {t.id: t for t in db.query(PrepTask).all()}
