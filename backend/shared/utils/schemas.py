"""
Shared Pydantic schemas used across the application.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatus = Literal["PENDING", "COOKING", "READY", "SERVED", "COMPLETED", "CANCELLED"]
BillStatus = Literal["OPEN", "PAID"]
PaymentMethod = Literal["CASH", "CARD"]


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """Input for a single item in an order."""

    menu_id: int = Field(gt=0)
    quantity: int = Field(ge=Limits.MIN_QUANTITY)
    note: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)


class CreateOrderRequest(BaseModel):
    """Request to place a new order at a table."""

    table_id: int = Field(gt=0)
    items: list[OrderItemInput] = Field(min_length=1)


class UpdateStatusRequest(BaseModel):
    """Request to move an order or an item to another status."""

    status: OrderStatus


class OrderItemOutput(BaseModel):
    """Output for a single order item."""

    id: int
    order_id: int
    menu_id: int
    menu_name: str | None = None
    quantity: int
    note: str | None = None
    status: OrderStatus
    unit_price_cents: int
    line_total_cents: int


class OrderOutput(BaseModel):
    """Output for an order with its items."""

    id: int
    table_id: int
    table_name: str | None = None
    bill_id: str
    status: OrderStatus
    total_cents: int
    created_at: datetime
    items: list[OrderItemOutput]


# =============================================================================
# Table Schemas
# =============================================================================


class CreateTableRequest(BaseModel):
    """Request to create a table."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)


class UpdateTableRequest(BaseModel):
    """Request to rename a table."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)


class AvailabilityRequest(BaseModel):
    """Request to open or close a table for new orders."""

    is_available: bool


class CallStaffRequest(BaseModel):
    """Request to raise or clear the call-staff flag."""

    is_calling_staff: bool


class CloseTableRequest(BaseModel):
    """Request to close a table and settle its bill."""

    payment_method: PaymentMethod | None = None


class TableOutput(BaseModel):
    """Output for a table."""

    id: int
    name: str
    is_available: bool
    is_occupied: bool
    is_calling_staff: bool


class TableStatusOutput(TableOutput):
    """Floor overview row for a table."""

    active_orders: int = 0
    ready_items: int = 0
    total_cents: int = 0


class TableDetailOutput(BaseModel):
    """A table with its unfinished orders and their items."""

    table: TableOutput
    orders: list[OrderOutput]


# =============================================================================
# Billing Schemas
# =============================================================================


class BillOutput(BaseModel):
    """Output for a bill."""

    id: str
    table_id: int
    status: BillStatus
    total_cents: int
    payment_method: str | None = None
    created_at: datetime
    closed_at: datetime | None = None


class BillDetailOutput(BillOutput):
    """
    Bill with every line item; cancelled items are listed but not counted.

    A table without an OPEN bill is reported with ``id``, ``status`` and
    ``created_at`` set to None and no items.
    """

    id: str | None = None
    status: BillStatus | None = None
    created_at: datetime | None = None
    items: list[OrderItemOutput]


class CloseTableOutput(BaseModel):
    """Result of closing a table. ``bill`` is None when the table had no open bill."""

    table: TableOutput
    bill: BillOutput | None = None


# =============================================================================
# Common Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None
