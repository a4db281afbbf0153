"""
Bill Aggregator.

Keeps one OPEN bill per table and its running total. All methods except
``get_table_bill`` participate in the caller's transaction and never commit.

Order creation adds to the total with an atomic SQL increment. Any status
change re-derives the total from the persisted items under the bill row
lock, because a cancellation cannot be subtracted safely while other
increments may be in flight.
"""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Bill, Order, OrderItem, Table
from rest_api.models.base import utcnow
from rest_api.services.domain.views import bill_detail_output
from shared.config.constants import BillStatus, OrderStatus
from shared.config.logging import billing_logger as logger
from shared.utils.exceptions import BillNotFoundError, BillNotOpenError, TableNotFoundError
from shared.utils.schemas import BillDetailOutput


class BillAggregator:
    """Domain service for Bill totals and lifecycle."""

    def __init__(self, db: Session):
        self._db = db

    def find_open_bill(self, table_id: int) -> Bill | None:
        return self._db.scalar(
            select(Bill)
            .where(Bill.table_id == table_id, Bill.status == BillStatus.OPEN)
            .execution_options(populate_existing=True)
        )

    def get_or_open_bill(self, table_id: int) -> Bill:
        """
        Return the table's OPEN bill, creating one with a zero total if none
        exists.

        Callers hold the table row lock, which serializes this per table on
        PostgreSQL. The partial unique index is the backstop: an insert that
        loses a race fails inside its savepoint and the winner's bill is used.
        """
        bill = self.find_open_bill(table_id)
        if bill is not None:
            return bill

        bill = Bill(table_id=table_id, status=BillStatus.OPEN, total_cents=0)
        try:
            with self._db.begin_nested():
                self._db.add(bill)
        except IntegrityError:
            existing = self.find_open_bill(table_id)
            if existing is None:
                raise
            logger.info("Open bill created concurrently, reusing", table_id=table_id, bill_id=existing.id)
            return existing

        logger.info("Bill opened", table_id=table_id, bill_id=bill.id)
        return bill

    def lock(self, bill_id: str) -> Bill:
        """Row-lock a bill for the rest of the current transaction."""
        bill = self._db.scalar(
            select(Bill)
            .where(Bill.id == bill_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if bill is None:
            raise BillNotFoundError(bill_id)
        return bill

    def apply_delta(self, bill_id: str, amount_cents: int) -> Bill:
        """
        Add ``amount_cents`` to an OPEN bill in a single UPDATE statement,
        so concurrent additions never lose an update.
        """
        result = self._db.execute(
            update(Bill)
            .where(Bill.id == bill_id, Bill.status == BillStatus.OPEN)
            .values(total_cents=Bill.total_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self._raise_not_open(bill_id)
        return self._db.get(Bill, bill_id, populate_existing=True)

    def recompute(self, bill_id: str) -> Bill:
        """
        Re-derive the total of an OPEN bill from its non-cancelled items and
        persist it. Runs under the bill row lock in the caller's transaction,
        so overlapping recomputes cannot write a stale total.
        """
        self._db.flush()
        bill = self.lock(bill_id)
        if bill.status != BillStatus.OPEN:
            raise BillNotOpenError(bill_id, bill.status)

        total = self.calculate_total(bill_id)
        if bill.total_cents != total:
            logger.debug(
                "Bill total recomputed",
                bill_id=bill_id,
                previous_cents=bill.total_cents,
                total_cents=total,
            )
            bill.total_cents = total
            self._db.flush()
        return bill

    def calculate_total(self, bill_id: str) -> int:
        """Sum of unit_price_cents * quantity over the bill's non-cancelled items."""
        return self._db.scalar(
            select(func.coalesce(func.sum(OrderItem.unit_price_cents * OrderItem.quantity), 0))
            .join(Order, OrderItem.order_id == Order.id)
            .where(
                Order.bill_id == bill_id,
                OrderItem.status != OrderStatus.CANCELLED,
            )
        )

    def close(self, bill_id: str, payment_method: str) -> Bill:
        """
        Move an OPEN bill to PAID. The status check and the write are one
        compare-and-set statement, so a bill is paid exactly once.
        """
        result = self._db.execute(
            update(Bill)
            .where(Bill.id == bill_id, Bill.status == BillStatus.OPEN)
            .values(status=BillStatus.PAID, closed_at=utcnow(), payment_method=payment_method)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self._raise_not_open(bill_id)

        bill = self._db.get(Bill, bill_id, populate_existing=True)
        logger.info(
            "Bill closed",
            bill_id=bill_id,
            table_id=bill.table_id,
            total_cents=bill.total_cents,
            payment_method=payment_method,
        )
        return bill

    def get_table_bill(self, table_id: int) -> BillDetailOutput:
        """
        The table's OPEN bill with every line item.

        A live table without an OPEN bill gets an empty bill (no id, no items,
        zero total) so clients can render the "no orders yet" state.

        Raises:
            TableNotFoundError: unknown or deleted table
        """
        bill = self._db.scalar(
            select(Bill)
            .where(Bill.table_id == table_id, Bill.status == BillStatus.OPEN)
            .options(
                selectinload(Bill.orders)
                .selectinload(Order.items)
                .selectinload(OrderItem.menu_item)
            )
        )
        if bill is not None:
            return bill_detail_output(bill)

        live = self._db.scalar(
            select(Table.id).where(Table.id == table_id, Table.is_active.is_(True))
        )
        if live is None:
            raise TableNotFoundError(table_id)
        return BillDetailOutput(table_id=table_id, total_cents=0, items=[])

    def _raise_not_open(self, bill_id: str) -> None:
        status = self._db.scalar(select(Bill.status).where(Bill.id == bill_id))
        if status is None:
            raise BillNotFoundError(bill_id)
        raise BillNotOpenError(bill_id, status)
