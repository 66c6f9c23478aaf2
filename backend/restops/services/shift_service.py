"""Cash register shifts and the Z-report."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from restops.costing.shift import ShiftTotals, close_shift
from restops.db.session import unit_of_work
from restops.models.sale import Sale, Shift, ShiftStatus
from restops.services.audit_service import log_action
from restops.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ShiftService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, shift_id: str) -> Shift:
        shift = self.db.get(Shift, shift_id)
        if shift is None:
            raise NotFoundError("Shift", shift_id)
        return shift

    def current(self) -> Optional[Shift]:
        return self.db.query(Shift).filter(Shift.status == ShiftStatus.OPEN.value).first()

    def history(self, limit: int = 50) -> List[Shift]:
        return self.db.query(Shift).order_by(Shift.start_time.desc()).limit(limit).all()

    def open(self, starting_cash: float = 0, operator_name: Optional[str] = None) -> Shift:
        if self.current() is not None:
            raise ValidationError("A shift is already open")
        with unit_of_work(self.db):
            shift = Shift(
                starting_cash=starting_cash,
                operator_name=operator_name,
                status=ShiftStatus.OPEN.value,
            )
            self.db.add(shift)
        self.db.refresh(shift)
        logger.info("Shift %s opened with %s cash", shift.id, starting_cash)
        return shift

    def summary(self, shift: Shift, actual_cash: float = 0) -> ShiftTotals:
        sales = self.db.query(Sale).filter(Sale.shift_id == shift.id).all()
        return close_shift(shift.starting_cash, sales, actual_cash)

    def close(self, shift_id: str, actual_cash: float, bank_deposit: Optional[float] = None) -> Shift:
        """Close a shift once, recording the Z-report figures."""
        shift = self.get(shift_id)
        if shift.status == ShiftStatus.CLOSED.value:
            raise ValidationError("Shift is already closed")

        totals = self.summary(shift, actual_cash)
        with unit_of_work(self.db):
            shift.end_time = datetime.now(timezone.utc)
            shift.expected_cash = totals.expected_cash
            shift.actual_cash = totals.actual_cash
            shift.card_sales = totals.card_sales
            shift.online_sales = totals.online_sales
            shift.discrepancy = totals.discrepancy
            shift.bank_deposit = bank_deposit
            shift.status = ShiftStatus.CLOSED.value
            log_action(
                self.db, "SHIFT_CLOSE", "SHIFT",
                f"Closed shift. Expected cash {totals.expected_cash:,.0f}, "
                f"counted {actual_cash:,.0f}, discrepancy {totals.discrepancy:,.0f}",
                user_name=shift.operator_name,
            )
        if totals.discrepancy:
            logger.warning("Shift %s closed with cash discrepancy %s", shift.id, totals.discrepancy)
        self.db.refresh(shift)
        return shift
