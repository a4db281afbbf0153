"""
Table Registry.

Owns the Table row: existence, availability, occupancy and the call-staff
flag. Nothing else writes those columns.

Two kinds of methods live here:
- transaction participants (get_for_update, mark_occupied, reset,
  sync_occupancy) run inside a caller's transaction and never commit;
- operations (create_table, rename_table, delete_table, set_availability,
  set_calling_staff) each run as their own transaction and emit
  ``table.updated`` after commit.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Bill, Order, OrderItem, Table
from rest_api.services.domain.views import order_output, table_output
from shared.config.constants import BillStatus, OrderStatus
from shared.config.logging import tables_logger as logger
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import run_atomic
from shared.infrastructure.events import TABLE_UPDATED, Event, NotificationGateway
from shared.utils.exceptions import (
    ConflictError,
    DuplicateEntityError,
    TableNotFoundError,
    ValidationError,
)
from shared.utils.schemas import TableDetailOutput, TableOutput, TableStatusOutput


class TableRegistry:
    """
    Domain service for Table state.

    Usage:
        tables = TableRegistry(db, notifier)
        table = tables.set_availability(table_id, True)
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationGateway,
        settings: Settings | None = None,
    ):
        self._db = db
        self._notifier = notifier
        self._settings = settings or get_settings()

    # =========================================================================
    # Transaction participants
    # =========================================================================

    def get_for_update(self, table_id: int, live_only: bool = True) -> Table:
        """
        Load and row-lock a table for the rest of the current transaction.

        Tombstoned tables are not found unless ``live_only`` is False; status
        changes on orders of a deleted table still need the lock.
        """
        stmt = select(Table).where(Table.id == table_id)
        if live_only:
            stmt = stmt.where(Table.is_active.is_(True))
        table = self._db.scalar(
            stmt.with_for_update().execution_options(populate_existing=True)
        )
        if table is None:
            raise TableNotFoundError(table_id)
        return table

    def mark_occupied(self, table: Table, occupied: bool) -> bool:
        """Set the occupancy flag. Returns True when it changed."""
        if table.is_occupied == occupied:
            return False
        table.is_occupied = occupied
        return True

    def reset(self, table: Table) -> None:
        """
        Clear the table after close. It stays unavailable until staff
        re-open it for the next guests.
        """
        table.is_occupied = False
        table.is_calling_staff = False
        table.is_available = False

    def sync_occupancy(self, table: Table) -> bool:
        """
        Re-derive occupancy from the table's orders.
        Returns True when the flag changed.
        """
        self._db.flush()
        occupying = self._db.scalar(
            select(func.count(Order.id)).where(
                Order.table_id == table.id,
                Order.status.in_(OrderStatus.OCCUPYING),
            )
        )
        return self.mark_occupied(table, bool(occupying))

    # =========================================================================
    # Operations
    # =========================================================================

    def create_table(self, name: str) -> TableOutput:
        """Create a live table. Names are unique among live tables."""
        name = self._clean_name(name)

        def _create() -> TableOutput:
            self._ensure_name_free(name)
            table = Table(name=name, is_available=True, is_occupied=False, is_calling_staff=False)
            self._db.add(table)
            self._db.flush()
            return table_output(table)

        output = run_atomic(self._db, _create, name="create_table")
        logger.info("Table created", table_id=output.id, name=output.name)
        return output

    def rename_table(self, table_id: int, name: str) -> TableOutput:
        name = self._clean_name(name)

        def _rename() -> TableOutput:
            table = self.get_for_update(table_id)
            if table.name != name:
                self._ensure_name_free(name, exclude_id=table.id)
                table.name = name
            self._db.flush()
            return table_output(table)

        output = run_atomic(self._db, _rename, name="rename_table")
        self._notifier.notify([self._updated_event(output)])
        return output

    def delete_table(self, table_id: int) -> None:
        """
        Soft delete a table. Occupied tables, and tables whose bill is still
        open, cannot be deleted.
        """

        def _delete() -> None:
            table = self.get_for_update(table_id)
            if table.is_occupied:
                raise ConflictError("Cannot delete an occupied table", table_id=table_id)
            open_bill = self._db.scalar(
                select(Bill.id).where(Bill.table_id == table.id, Bill.status == BillStatus.OPEN)
            )
            if open_bill is not None:
                raise ConflictError(
                    "Cannot delete a table with an open bill",
                    table_id=table_id,
                    bill_id=open_bill,
                )
            table.soft_delete()

        run_atomic(self._db, _delete, name="delete_table")
        logger.info("Table deleted", table_id=table_id)

    def set_availability(self, table_id: int, available: bool) -> TableOutput:
        """
        Open or close a table for new orders.

        Marking an occupied table unavailable is a staff override controlled
        by the ``allow_unavailable_while_occupied`` setting.
        """

        def _set() -> tuple[TableOutput, bool]:
            table = self.get_for_update(table_id)
            if table.is_available == available:
                return table_output(table), False
            if (
                not available
                and table.is_occupied
                and not self._settings.allow_unavailable_while_occupied
            ):
                raise ValidationError(
                    "Cannot mark an occupied table unavailable",
                    table_id=table_id,
                )
            table.is_available = available
            self._db.flush()
            return table_output(table), True

        output, changed = run_atomic(self._db, _set, name="set_availability")
        if changed:
            logger.info("Table availability changed", table_id=table_id, is_available=available)
            self._notifier.notify([self._updated_event(output)])
        return output

    def set_calling_staff(self, table_id: int, calling: bool) -> TableOutput:
        """Raise or clear the call-staff flag."""

        def _set() -> tuple[TableOutput, bool]:
            table = self.get_for_update(table_id)
            if table.is_calling_staff == calling:
                return table_output(table), False
            table.is_calling_staff = calling
            self._db.flush()
            return table_output(table), True

        output, changed = run_atomic(self._db, _set, name="set_calling_staff")
        if changed:
            logger.info("Table call-staff changed", table_id=table_id, is_calling_staff=calling)
            self._notifier.notify([self._updated_event(output)])
        return output

    # =========================================================================
    # Queries
    # =========================================================================

    def get_table(self, table_id: int) -> TableOutput:
        return table_output(self._get_live(table_id))

    def list_table_status(self) -> list[TableStatusOutput]:
        """
        Floor overview: one row per live table with its open order count,
        READY item count and the running total of its open bill.
        """
        tables = self._db.scalars(
            select(Table).where(Table.is_active.is_(True)).order_by(Table.id)
        ).all()

        active_orders = dict(
            self._db.execute(
                select(Order.table_id, func.count(Order.id))
                .where(Order.status.in_(OrderStatus.ACTIVE))
                .group_by(Order.table_id)
            ).all()
        )
        ready_items = dict(
            self._db.execute(
                select(Order.table_id, func.count(OrderItem.id))
                .join(OrderItem, OrderItem.order_id == Order.id)
                .where(
                    Order.status != OrderStatus.COMPLETED,
                    OrderItem.status == OrderStatus.READY,
                )
                .group_by(Order.table_id)
            ).all()
        )
        open_totals = dict(
            self._db.execute(
                select(Bill.table_id, Bill.total_cents).where(Bill.status == BillStatus.OPEN)
            ).all()
        )

        return [
            TableStatusOutput(
                **table_output(table).model_dump(),
                active_orders=active_orders.get(table.id, 0),
                ready_items=ready_items.get(table.id, 0),
                total_cents=open_totals.get(table.id, 0),
            )
            for table in tables
        ]

    def get_table_details(self, table_id: int) -> TableDetailOutput:
        """A live table with its unfinished orders and their items."""
        table = self._get_live(table_id)
        orders = self._db.scalars(
            select(Order)
            .where(Order.table_id == table.id, Order.status != OrderStatus.COMPLETED)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.id)
        ).all()
        return TableDetailOutput(
            table=table_output(table),
            orders=[order_output(order) for order in orders],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_live(self, table_id: int) -> Table:
        table = self._db.scalar(
            select(Table).where(Table.id == table_id, Table.is_active.is_(True))
        )
        if table is None:
            raise TableNotFoundError(table_id)
        return table

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Table name must not be empty", field="name")
        return cleaned

    def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        stmt = select(Table.id).where(Table.name == name, Table.is_active.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(Table.id != exclude_id)
        if self._db.scalar(stmt) is not None:
            raise DuplicateEntityError("Table", name)

    @staticmethod
    def _updated_event(output: TableOutput) -> Event:
        return Event(type=TABLE_UPDATED, table_id=output.id, entity=output.model_dump(mode="json"))
