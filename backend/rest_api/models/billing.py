"""
Billing Model: Bill.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import BillStatus

from .base import Base, IdType, utcnow

if TYPE_CHECKING:
    from .order import Order
    from .table import Table


def _new_bill_id() -> str:
    return str(uuid.uuid4())


class Bill(Base):
    """
    The running bill of a table.

    A table has at most one OPEN bill; every order placed while it is open
    attaches to it. ``total_cents`` always equals the sum of
    ``unit_price_cents * quantity`` over the non-cancelled items of those orders.
    """

    __tablename__ = "bill"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_bill_id)
    table_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("dining_table.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        Text, default=BillStatus.OPEN, nullable=False, index=True
    )  # OPEN, PAID
    total_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="bills")
    orders: Mapped[list["Order"]] = relationship(back_populates="bill", order_by="Order.id")

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="chk_bill_total_non_negative"),
        # At most one OPEN bill per table, guarded by the database
        Index(
            "uq_bill_open_per_table",
            "table_id",
            unique=True,
            postgresql_where=text("status = 'OPEN'"),
            sqlite_where=text("status = 'OPEN'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Bill(id={self.id}, table={self.table_id}, total={self.total_cents}, status={self.status})>"
