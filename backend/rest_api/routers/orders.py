"""
Orders router.
Order placement, kitchen progress and the active-orders board.
"""

from fastapi import APIRouter, Depends, Query, status

from rest_api.core.dependencies import get_order_lifecycle, get_status_machine
from rest_api.services.domain import ItemStatusStateMachine, OrderLifecycleManager
from shared.utils.schemas import (
    CreateOrderRequest,
    OrderItemOutput,
    OrderOutput,
    UpdateStatusRequest,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: CreateOrderRequest,
    orders: OrderLifecycleManager = Depends(get_order_lifecycle),
) -> OrderOutput:
    """
    Place an order at a table.

    Opens the table's bill if it has none, adds the order total to it and
    marks the table occupied.
    """
    return orders.create_order(body.table_id, body.items)


@router.get("/active", response_model=list[OrderOutput])
def list_active_orders(
    statuses: list[str] | None = Query(
        None,
        description="Statuses to include, repeated or comma separated. "
        "Defaults to PENDING, COOKING and READY.",
    ),
    orders: OrderLifecycleManager = Depends(get_order_lifecycle),
) -> list[OrderOutput]:
    """Kitchen board: orders in the given statuses, oldest first."""
    wanted = [
        value.strip().upper()
        for raw in statuses or []
        for value in raw.split(",")
        if value.strip()
    ]
    return orders.list_active_orders(wanted or None)


@router.get("/table/{table_id}", response_model=list[OrderOutput])
def list_table_orders(
    table_id: int,
    orders: OrderLifecycleManager = Depends(get_order_lifecycle),
) -> list[OrderOutput]:
    """Unfinished orders of a table, oldest first."""
    return orders.list_table_orders(table_id)


@router.patch("/items/{item_id}/status", response_model=OrderItemOutput)
def update_item_status(
    item_id: int,
    body: UpdateStatusRequest,
    machine: ItemStatusStateMachine = Depends(get_status_machine),
) -> OrderItemOutput:
    """Move a single item. Siblings and the parent order are not touched."""
    return machine.transition_item(item_id, body.status)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: UpdateStatusRequest,
    machine: ItemStatusStateMachine = Depends(get_status_machine),
) -> OrderOutput:
    """Move an order and cascade the status to its items."""
    return machine.transition_order(order_id, body.status)
