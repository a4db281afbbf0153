"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .billing import Bill
    from .catalog import MenuItem
    from .table import Table


class Order(TimestampMixin, Base):
    """
    One order placed at a table. Attached for life to the bill that was open
    when it was created.
    Inherits: created_at, updated_at from TimestampMixin.
    """

    __tablename__ = "app_order"  # "order" is a reserved SQL keyword

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    table_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("dining_table.id"), nullable=False, index=True
    )
    bill_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bill.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )
    # Snapshot of the order's value when placed; the bill is the live figure
    total_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="orders")
    bill: Mapped["Bill"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", order_by="OrderItem.id"
    )

    __table_args__ = (
        Index("ix_order_table_status", "table_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, table={self.table_id}, bill={self.bill_id}, status='{self.status}')>"


class OrderItem(TimestampMixin, Base):
    """
    A line of an order. The unit price is frozen when the order is created so
    later menu price changes never alter an existing bill.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("app_order.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("menu_item.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
        Index("ix_order_item_order_status", "order_id", "status"),
    )

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def __repr__(self) -> str:
        return (
            f"<OrderItem(id={self.id}, order={self.order_id}, menu={self.menu_id}, "
            f"qty={self.quantity}, status='{self.status}')>"
        )
