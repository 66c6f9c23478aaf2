"""Kitchen prep (mise en place) models."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restops.db.base import Base, IdMixin, TimestampMixin, VersionMixin


class PrepTask(Base, IdMixin, TimestampMixin, VersionMixin):
    """A semi-finished product with its own recipe and par level."""

    __tablename__ = "prep_tasks"

    item: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    station: Mapped[str] = mapped_column(String(100), nullable=False, default="prep")
    par_level: Mapped[float] = mapped_column(Float, nullable=False)
    on_hand: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    batch_size: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    cost_per_unit: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    recipe: Mapped[list["PrepRecipeLine"]] = relationship(
        "PrepRecipeLine",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="PrepRecipeLine.position",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def name(self) -> str:
        return self.item


class PrepRecipeLine(Base, IdMixin):
    """Raw ingredient consumed by one batch of a prep task."""

    __tablename__ = "prep_recipe_lines"

    task_id: Mapped[str] = mapped_column(
        ForeignKey("prep_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    source: Mapped[str] = mapped_column(String(20), default="inventory", nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    task: Mapped["PrepTask"] = relationship("PrepTask", back_populates="recipe")
