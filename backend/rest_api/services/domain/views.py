"""
ORM to output schema builders shared by the domain services.

Every service returns these outputs, and events carry the same data, so an
operation's response and its notification never disagree.
"""

from rest_api.models import Bill, Order, OrderItem, Table
from shared.utils.schemas import (
    BillDetailOutput,
    BillOutput,
    OrderItemOutput,
    OrderOutput,
    TableOutput,
)


def item_output(item: OrderItem) -> OrderItemOutput:
    return OrderItemOutput(
        id=item.id,
        order_id=item.order_id,
        menu_id=item.menu_id,
        menu_name=item.menu_item.name if item.menu_item else None,
        quantity=item.quantity,
        note=item.note,
        status=item.status,
        unit_price_cents=item.unit_price_cents,
        line_total_cents=item.line_total_cents,
    )


def order_output(order: Order) -> OrderOutput:
    return OrderOutput(
        id=order.id,
        table_id=order.table_id,
        table_name=order.table.name if order.table else None,
        bill_id=order.bill_id,
        status=order.status,
        total_cents=order.total_cents,
        created_at=order.created_at,
        items=[item_output(item) for item in order.items],
    )


def table_output(table: Table) -> TableOutput:
    return TableOutput(
        id=table.id,
        name=table.name,
        is_available=table.is_available,
        is_occupied=table.is_occupied,
        is_calling_staff=table.is_calling_staff,
    )


def bill_output(bill: Bill) -> BillOutput:
    return BillOutput(
        id=bill.id,
        table_id=bill.table_id,
        status=bill.status,
        total_cents=bill.total_cents,
        payment_method=bill.payment_method,
        created_at=bill.created_at,
        closed_at=bill.closed_at,
    )


def bill_detail_output(bill: Bill) -> BillDetailOutput:
    items = [item_output(item) for order in bill.orders for item in order.items]
    return BillDetailOutput(**bill_output(bill).model_dump(), items=items)
