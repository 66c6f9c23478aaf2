"""Operating expense routes."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession, unit_of_work
from restops.models.expense import Expense
from restops.schemas.invoice import ExpenseCreate, ExpenseResponse
from restops.services.audit_service import log_action

router = APIRouter()


@router.get("/", response_model=list[ExpenseResponse])
@limiter.limit("60/minute")
def list_expenses(request: Request, db: DbSession, category: Optional[str] = None):
    query = db.query(Expense)
    if category:
        query = query.filter(Expense.category == category)
    return query.order_by(Expense.date.desc()).limit(1000).all()


@router.post("/", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_expense(request: Request, data: ExpenseCreate, db: DbSession):
    with unit_of_work(db):
        expense = Expense(
            title=data.title,
            amount=data.amount,
            category=data.category.value,
            date=data.date or datetime.now(timezone.utc).date(),
            description=data.description,
        )
        db.add(expense)
        log_action(db, "CREATE", "EXPENSE", f"Added expense: {data.title} ({data.amount:,.0f})")
    db.refresh(expense)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_expense(request: Request, expense_id: str, db: DbSession):
    expense = db.get(Expense, expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="Expense not found")
    with unit_of_work(db):
        log_action(db, "DELETE", "EXPENSE", f"Deleted expense: {expense.title}")
        db.delete(expense)
