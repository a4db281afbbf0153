"""
Item Status State Machine.

Order- and item-level status transitions and their effect on the bill.
Both paths lock the owning table first and then the bill, and both end in
BillAggregator.recompute, so an order-level cascade and a single-item change
racing on the same bill serialize instead of overwriting each other.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order, OrderItem
from rest_api.services.domain.bill_aggregator import BillAggregator
from rest_api.services.domain.table_registry import TableRegistry
from rest_api.services.domain.views import item_output, order_output, table_output
from shared.config.constants import (
    OrderStatus,
    is_progressed_past,
    validate_order_transition,
)
from shared.config.logging import kitchen_logger as logger
from shared.infrastructure.db import run_atomic
from shared.infrastructure.events import (
    ITEM_STATUS_CHANGED,
    ORDER_STATUS_CHANGED,
    TABLE_UPDATED,
    Event,
    NotificationGateway,
)
from shared.utils.exceptions import (
    ConflictError,
    InvalidTransitionError,
    OrderItemNotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import OrderItemOutput, OrderOutput


def _ensure_known_status(status: str) -> None:
    if status not in OrderStatus.ALL:
        raise ValidationError(f"Unknown status '{status}'", field="status", value=status)


class ItemStatusStateMachine:
    """
    Domain service for status transitions.

    Moving to the current status is a no-op: nothing is written and no
    event is emitted.
    """

    def __init__(
        self,
        db: Session,
        tables: TableRegistry,
        bills: BillAggregator,
        notifier: NotificationGateway,
    ):
        self._db = db
        self._tables = tables
        self._bills = bills
        self._notifier = notifier

    def transition_item(self, item_id: int, new_status: str) -> OrderItemOutput:
        """Move one order item to ``new_status`` and recompute its bill."""
        _ensure_known_status(new_status)

        def _transition() -> tuple[OrderItemOutput, list[Event]]:
            item = self._db.get(OrderItem, item_id)
            if item is None:
                raise OrderItemNotFoundError(item_id)
            order = item.order
            self._tables.get_for_update(order.table_id, live_only=False)
            self._bills.lock(order.bill_id)
            # Re-read under the locks; another request may have moved it
            item = self._reload_item(item_id)

            if item.status == new_status:
                return item_output(item), []
            if not validate_order_transition(item.status, new_status):
                raise InvalidTransitionError(
                    "order item", item.status, new_status, item_id=item_id
                )

            previous = item.status
            item.status = new_status
            self._bills.recompute(order.bill_id)

            logger.info(
                "Item status changed",
                item_id=item_id,
                order_id=order.id,
                from_status=previous,
                to_status=new_status,
            )
            output = item_output(item)
            event = Event(
                type=ITEM_STATUS_CHANGED,
                table_id=order.table_id,
                entity=output.model_dump(mode="json"),
            )
            return output, [event]

        output, events = run_atomic(self._db, _transition, name="transition_item")
        self._notifier.notify(events)
        return output

    def transition_order(self, order_id: int, new_status: str) -> OrderOutput:
        """
        Move an order to ``new_status`` and cascade to its items.

        Cancelled items are frozen. Items that already progressed to or past
        the target keep their status. Cancelling an order with a served or
        completed item is a conflict.
        """
        _ensure_known_status(new_status)

        def _transition() -> tuple[OrderOutput, list[Event]]:
            order = self._db.get(Order, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            table = self._tables.get_for_update(order.table_id, live_only=False)
            self._bills.lock(order.bill_id)
            order = self._reload_order(order_id)

            if order.status == new_status:
                return order_output(order), []
            if not validate_order_transition(order.status, new_status):
                raise InvalidTransitionError(
                    "order", order.status, new_status, order_id=order_id
                )

            items = [item for item in order.items if item.status != OrderStatus.CANCELLED]
            if new_status == OrderStatus.CANCELLED:
                served = [
                    item.id for item in items
                    if item.status in (OrderStatus.SERVED, OrderStatus.COMPLETED)
                ]
                if served:
                    raise ConflictError(
                        "Cannot cancel an order with served items",
                        order_id=order_id,
                        served_item_ids=served,
                    )

            moved = 0
            for item in items:
                if new_status != OrderStatus.CANCELLED and is_progressed_past(item.status, new_status):
                    continue
                item.status = new_status
                moved += 1

            previous = order.status
            order.status = new_status
            self._bills.recompute(order.bill_id)
            occupancy_changed = self._tables.sync_occupancy(table)

            logger.info(
                "Order status changed",
                order_id=order_id,
                from_status=previous,
                to_status=new_status,
                items_moved=moved,
            )
            output = order_output(order)
            events = [
                Event(
                    type=ORDER_STATUS_CHANGED,
                    table_id=order.table_id,
                    entity=output.model_dump(mode="json"),
                )
            ]
            if occupancy_changed:
                events.append(
                    Event(
                        type=TABLE_UPDATED,
                        table_id=table.id,
                        entity=table_output(table).model_dump(mode="json"),
                    )
                )
            return output, events

        output, events = run_atomic(self._db, _transition, name="transition_order")
        self._notifier.notify(events)
        return output

    def _reload_item(self, item_id: int) -> OrderItem:
        return self._db.scalar(
            select(OrderItem)
            .where(OrderItem.id == item_id)
            .execution_options(populate_existing=True)
        )

    def _reload_order(self, order_id: int) -> Order:
        return self._db.scalar(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
