"""Menu item and recipe models.

A menu item's cost is never stored: it follows ingredient and prep costs and
is recomputed whenever the item is read.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restops.db.base import Base, IdMixin, TimestampMixin


class MenuItem(Base, IdMixin, TimestampMixin):
    """A sellable dish or drink."""

    __tablename__ = "menu_items"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    recipe: Mapped[list["MenuRecipeLine"]] = relationship(
        "MenuRecipeLine",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuRecipeLine.position",
    )


class MenuRecipeLine(Base, IdMixin):
    """An ingredient or prep item consumed per portion."""

    __tablename__ = "menu_recipe_lines"

    menu_item_id: Mapped[str] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    source: Mapped[str] = mapped_column(String(20), default="inventory", nullable=False)  # inventory, prep
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    menu_item: Mapped["MenuItem"] = relationship("MenuItem", back_populates="recipe")
