"""
Order Lifecycle Manager.

Atomic order creation and table close. Each operation is one transaction
that starts by row-locking the table, which serializes all writers of a
table: two orders racing for the same table share one bill, and a close
cannot interleave with a status change.
"""

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from rest_api.models import Order, OrderItem
from rest_api.services.domain.bill_aggregator import BillAggregator
from rest_api.services.domain.menu_oracle import MenuPriceOracle
from rest_api.services.domain.table_registry import TableRegistry
from rest_api.services.domain.views import bill_output, order_output, table_output
from shared.config.constants import Limits, OrderStatus
from shared.config.logging import orders_logger as logger
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import run_atomic
from shared.infrastructure.events import (
    ORDER_CREATED,
    TABLE_CLOSED,
    TABLE_UPDATED,
    Event,
    NotificationGateway,
)
from shared.utils.exceptions import (
    TableNotAvailableError,
    UnservedItemsError,
    ValidationError,
)
from shared.utils.schemas import CloseTableOutput, OrderItemInput, OrderOutput


class OrderLifecycleManager:
    """
    Domain service for order creation, table close and order listings.

    Usage:
        manager = OrderLifecycleManager(db, tables, bills, menu, notifier)
        order = manager.create_order(table_id, [OrderItemInput(menu_id=5, quantity=2)])
    """

    def __init__(
        self,
        db: Session,
        tables: TableRegistry,
        bills: BillAggregator,
        menu: MenuPriceOracle,
        notifier: NotificationGateway,
        settings: Settings | None = None,
    ):
        self._db = db
        self._tables = tables
        self._bills = bills
        self._menu = menu
        self._notifier = notifier
        self._settings = settings or get_settings()

    # =========================================================================
    # Create
    # =========================================================================

    def create_order(self, table_id: int, items: Sequence[OrderItemInput]) -> OrderOutput:
        """
        Place an order at a table.

        Prices are read once per distinct menu item and frozen into the items.
        The order, its items, the bill increment and the occupancy flag commit
        together or not at all.

        Raises:
            ValidationError: empty item list, quantity below 1, unavailable table
            NotFoundError: unknown table or menu item
        """
        self._validate_items(items)

        def _create() -> tuple[OrderOutput, list[Event]]:
            table = self._tables.get_for_update(table_id)
            if not table.is_available:
                raise TableNotAvailableError(table_id)

            prices: dict[int, int] = {}
            for line in items:
                if line.menu_id not in prices:
                    prices[line.menu_id] = self._menu.price_of(line.menu_id)

            order_total = sum(prices[line.menu_id] * line.quantity for line in items)

            bill = self._bills.get_or_open_bill(table.id)
            order = Order(
                table_id=table.id,
                bill_id=bill.id,
                status=OrderStatus.PENDING,
                total_cents=order_total,
            )
            order.items = [
                OrderItem(
                    menu_id=line.menu_id,
                    quantity=line.quantity,
                    note=line.note,
                    status=OrderStatus.PENDING,
                    unit_price_cents=prices[line.menu_id],
                )
                for line in items
            ]
            self._db.add(order)
            self._db.flush()

            self._bills.apply_delta(bill.id, order_total)
            occupancy_changed = self._tables.mark_occupied(table, True)
            self._db.flush()

            output = order_output(order)
            events = [
                Event(type=ORDER_CREATED, table_id=table.id, entity=output.model_dump(mode="json"))
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

        output, events = run_atomic(self._db, _create, name="create_order")
        logger.info(
            "Order created",
            order_id=output.id,
            table_id=table_id,
            bill_id=output.bill_id,
            total_cents=output.total_cents,
            items=len(output.items),
        )
        self._notifier.notify(events)
        return output

    @staticmethod
    def _validate_items(items: Sequence[OrderItemInput]) -> None:
        if not items:
            raise ValidationError("Order must contain at least one item", field="items")
        for line in items:
            if line.quantity < Limits.MIN_QUANTITY:
                raise ValidationError(
                    "Quantity must be at least 1",
                    field="quantity",
                    menu_id=line.menu_id,
                    value=line.quantity,
                )

    # =========================================================================
    # Close
    # =========================================================================

    def close_table(self, table_id: int, payment_method: str | None = None) -> CloseTableOutput:
        """
        Settle a table: pay its open bill, complete its orders and reset it.

        The unserved-items check and the completion sweep run under the same
        table lock, so no item can move back into the kitchen in between.

        Raises:
            NotFoundError: unknown table
            UnservedItemsError: an item is still PENDING, COOKING or READY
        """
        method = payment_method or self._settings.default_payment_method

        def _close() -> tuple[CloseTableOutput, list[Event]]:
            table = self._tables.get_for_update(table_id)

            unserved = self._count_unserved_items(table.id)
            if unserved:
                raise UnservedItemsError(table.id, unserved)

            bill = self._bills.find_open_bill(table.id)
            if bill is not None:
                self._bills.recompute(bill.id)
                bill = self._bills.close(bill.id, method)

            self._complete_orders(table.id)
            self._tables.reset(table)
            self._db.flush()

            output = CloseTableOutput(
                table=table_output(table),
                bill=bill_output(bill) if bill is not None else None,
            )
            event = Event(type=TABLE_CLOSED, table_id=table.id, entity=output.model_dump(mode="json"))
            return output, [event]

        output, events = run_atomic(self._db, _close, name="close_table")
        logger.info(
            "Table closed",
            table_id=table_id,
            bill_id=output.bill.id if output.bill else None,
            total_cents=output.bill.total_cents if output.bill else 0,
            payment_method=method,
        )
        self._notifier.notify(events)
        return output

    def _count_unserved_items(self, table_id: int) -> int:
        return self._db.scalar(
            select(func.count(OrderItem.id))
            .join(Order, OrderItem.order_id == Order.id)
            .where(
                Order.table_id == table_id,
                Order.status != OrderStatus.COMPLETED,
                OrderItem.status.notin_(OrderStatus.CLOSABLE),
            )
        )

    def _complete_orders(self, table_id: int) -> None:
        """Move every unfinished, non-cancelled order and item of the table to COMPLETED."""
        open_order_ids = select(Order.id).where(
            Order.table_id == table_id,
            Order.status.notin_(OrderStatus.TERMINAL),
        )
        self._db.execute(
            update(OrderItem)
            .where(
                OrderItem.order_id.in_(open_order_ids),
                OrderItem.status.notin_(OrderStatus.TERMINAL),
            )
            .values(status=OrderStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )
        self._db.execute(
            update(Order)
            .where(
                Order.table_id == table_id,
                Order.status.notin_(OrderStatus.TERMINAL),
            )
            .values(status=OrderStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_active_orders(self, statuses: Sequence[str] | None = None) -> list[OrderOutput]:
        """
        Orders whose status is in ``statuses`` (PENDING, COOKING and READY by
        default), oldest first. Orders without items are skipped.
        """
        wanted = list(statuses) if statuses else list(OrderStatus.ACTIVE)
        unknown = [status for status in wanted if status not in OrderStatus.ALL]
        if unknown:
            raise ValidationError(f"Unknown status filter: {', '.join(unknown)}", field="statuses")

        orders = self._db.scalars(
            select(Order)
            .where(
                Order.status.in_(wanted),
                Order.items.any(),
            )
            .options(
                joinedload(Order.table),
                selectinload(Order.items).selectinload(OrderItem.menu_item),
            )
            .order_by(Order.created_at, Order.id)
        ).all()
        return [order_output(order) for order in orders]

    def list_table_orders(self, table_id: int) -> list[OrderOutput]:
        """Unfinished orders of a live table, oldest first."""
        self._tables.get_table(table_id)
        orders = self._db.scalars(
            select(Order)
            .where(Order.table_id == table_id, Order.status != OrderStatus.COMPLETED)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.created_at, Order.id)
        ).all()
        return [order_output(order) for order in orders]
