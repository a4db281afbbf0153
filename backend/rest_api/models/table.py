"""
Table Model: a physical table on the restaurant floor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .billing import Bill
    from .order import Order


class Table(AuditMixin, Base):
    """
    Physical table on the floor.
    Inherits: is_active, created_at, updated_at, deleted_at from AuditMixin.

    Flags:
    - is_available: staff switch; unavailable tables reject new orders
    - is_occupied: derived from the table's orders, never set by clients
    - is_calling_staff: customer pressed the call button
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "dining_table"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    # Unique among live tables; enforced by TableRegistry
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_occupied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_calling_staff: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_dining_table_name", "name"),
    )

    # Relationships
    orders: Mapped[list["Order"]] = relationship(back_populates="table")
    bills: Mapped[list["Bill"]] = relationship(back_populates="table")

    def __repr__(self) -> str:
        return (
            f"<Table(id={self.id}, name='{self.name}', available={self.is_available}, "
            f"occupied={self.is_occupied})>"
        )
