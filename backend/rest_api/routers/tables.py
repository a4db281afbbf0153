"""
Tables router.
Floor overview, table administration and table close.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from rest_api.core.dependencies import get_order_lifecycle, get_table_registry
from rest_api.services.domain import OrderLifecycleManager, TableRegistry
from shared.utils.schemas import (
    AvailabilityRequest,
    CallStaffRequest,
    CloseTableOutput,
    CloseTableRequest,
    CreateTableRequest,
    TableDetailOutput,
    TableOutput,
    TableStatusOutput,
    UpdateTableRequest,
)


router = APIRouter(prefix="/api/tables", tags=["tables"])


# =============================================================================
# Queries
# =============================================================================


@router.get("/status", response_model=list[TableStatusOutput])
def list_table_status(
    tables: TableRegistry = Depends(get_table_registry),
) -> list[TableStatusOutput]:
    """
    Floor overview for staff.

    One row per table with occupancy, open order count, READY item count
    and the running total of the open bill.
    """
    return tables.list_table_status()


@router.get("/{table_id}", response_model=TableDetailOutput)
def get_table_details(
    table_id: int,
    tables: TableRegistry = Depends(get_table_registry),
) -> TableDetailOutput:
    return tables.get_table_details(table_id)


# =============================================================================
# Administration
# =============================================================================


@router.post("", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: CreateTableRequest,
    tables: TableRegistry = Depends(get_table_registry),
) -> TableOutput:
    return tables.create_table(body.name)


@router.patch("/{table_id}", response_model=TableOutput)
def rename_table(
    table_id: int,
    body: UpdateTableRequest,
    tables: TableRegistry = Depends(get_table_registry),
) -> TableOutput:
    return tables.rename_table(table_id, body.name)


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    tables: TableRegistry = Depends(get_table_registry),
) -> Response:
    """Soft delete. Refused while the table is occupied or has an open bill."""
    tables.delete_table(table_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{table_id}/availability", response_model=TableOutput)
def set_availability(
    table_id: int,
    body: AvailabilityRequest,
    tables: TableRegistry = Depends(get_table_registry),
) -> TableOutput:
    return tables.set_availability(table_id, body.is_available)


@router.patch("/{table_id}/call-staff", response_model=TableOutput)
def set_calling_staff(
    table_id: int,
    body: CallStaffRequest,
    tables: TableRegistry = Depends(get_table_registry),
) -> TableOutput:
    return tables.set_calling_staff(table_id, body.is_calling_staff)


# =============================================================================
# Close
# =============================================================================


@router.post("/{table_id}/close", response_model=CloseTableOutput)
def close_table(
    table_id: int,
    body: CloseTableRequest | None = None,
    orders: OrderLifecycleManager = Depends(get_order_lifecycle),
) -> CloseTableOutput:
    """
    Settle the table: mark its open bill PAID, complete every order and
    reset the table flags.

    Returns 409 while any item is still PENDING, COOKING or READY.
    """
    payment_method = body.payment_method if body else None
    return orders.close_table(table_id, payment_method)
