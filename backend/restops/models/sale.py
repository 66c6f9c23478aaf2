"""Sales, sold lines and cash-register shifts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restops.db.base import Base, IdMixin
from restops.models.inventory import utcnow


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"
    VOID = "void"


class SaleStatus(str, Enum):
    """Kitchen status of a sale. Only ever moves forward."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"


SALE_STATUS_ORDER = [
    SaleStatus.PENDING.value,
    SaleStatus.PREPARING.value,
    SaleStatus.READY.value,
    SaleStatus.DELIVERED.value,
]


class ShiftStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Shift(Base, IdMixin):
    """A cash-register session closed with a Z-report."""

    __tablename__ = "shifts"

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    starting_cash: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    expected_cash: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_cash: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    card_sales: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    online_sales: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    bank_deposit: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    discrepancy: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ShiftStatus.OPEN.value, nullable=False, index=True
    )
    operator_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    sales: Mapped[list["Sale"]] = relationship("Sale", back_populates="shift")


class Sale(Base, IdMixin):
    """A settled checkout with price and cost frozen at sale time."""

    __tablename__ = "sales"

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)
    tax: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    shift_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    table_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=SaleStatus.PENDING.value, nullable=False)

    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem", back_populates="sale", cascade="all, delete-orphan"
    )
    shift: Mapped[Optional["Shift"]] = relationship("Shift", back_populates="sales")


class SaleItem(Base, IdMixin):
    __tablename__ = "sale_items"

    sale_id: Mapped[str] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Not a foreign key: sold lines outlive deleted menu items.
    menu_item_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    price_at_sale: Mapped[float] = mapped_column(Float, nullable=False)
    cost_at_sale: Mapped[float] = mapped_column(Float, nullable=False)

    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")
