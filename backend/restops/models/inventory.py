"""Raw ingredient stock, purchase lots, suppliers and waste."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restops.db.base import Base, IdMixin, TimestampMixin, VersionMixin


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Supplier(Base, IdMixin, TimestampMixin):
    """Vendor that ingredients and invoices are attributed to."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    ingredients: Mapped[list["Ingredient"]] = relationship("Ingredient", back_populates="supplier")


class Ingredient(Base, IdMixin, TimestampMixin, VersionMixin):
    """A raw material kept in stock at a weighted-average unit cost."""

    __tablename__ = "ingredients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    current_stock: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    cost_per_unit: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    min_threshold: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    supplier_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    supplier: Mapped[Optional["Supplier"]] = relationship("Supplier", back_populates="ingredients")
    purchase_history: Mapped[list["PurchaseLot"]] = relationship(
        "PurchaseLot",
        back_populates="ingredient",
        cascade="all, delete-orphan",
        order_by="PurchaseLot.date",
    )

    __mapper_args__ = {"version_id_col": version}


class PurchaseLot(Base, IdMixin):
    """One received quantity at its own unit cost."""

    __tablename__ = "purchase_lots"

    ingredient_id: Mapped[str] = mapped_column(
        ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    cost_per_unit: Mapped[float] = mapped_column(Float, nullable=False)

    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="purchase_history")


class WasteRecord(Base, IdMixin):
    """Append-only record of spoiled or discarded stock."""

    __tablename__ = "waste_records"

    item_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    item_source: Mapped[str] = mapped_column(String(20), nullable=False)  # inventory, prep
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    cost_loss: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
