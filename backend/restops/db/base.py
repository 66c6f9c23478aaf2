"""SQLAlchemy declarative base and common utilities."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    """Server-assigned identity for inserted rows."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class IdMixin:
    """UUID string primary key assigned on insert."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class VersionConflict(ValueError):
    """A client edited a row from an older snapshot."""


class VersionMixin:
    """Optimistic locking helpers.

    Models using this mixin declare their own ``version`` column and register
    it as ``version_id_col`` so SQLAlchemy bumps it on every flush and raises
    ``StaleDataError`` when a concurrent writer got there first. Clients that
    send back the version they read can be checked up front with
    ``check_version()``.
    """

    def check_version(self, expected: Optional[int]) -> None:
        """Raise VersionConflict if *expected* doesn't match current version."""
        if expected is not None and expected != self.version:
            raise VersionConflict(
                f"Version conflict: expected {expected}, current {self.version}"
            )
