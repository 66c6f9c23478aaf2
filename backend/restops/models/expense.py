"""Operating expenses."""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Date, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from restops.db.base import Base, IdMixin, TimestampMixin


class ExpenseCategory(str, Enum):
    RENT = "rent"
    SALARY = "salary"
    UTILITIES = "utilities"
    MARKETING = "marketing"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class Expense(Base, IdMixin, TimestampMixin):
    """Overhead cost counted as OpEx in the P&L."""

    __tablename__ = "expenses"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(20), default=ExpenseCategory.OTHER.value, nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
