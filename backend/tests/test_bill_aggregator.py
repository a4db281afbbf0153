"""
Tests for BillAggregator.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from rest_api.models import Bill, Order, OrderItem
from shared.config.constants import BillStatus, OrderStatus
from shared.utils.exceptions import BillNotFoundError, BillNotOpenError, NotFoundError
from tests.conftest import open_bills_for


def _add_order(db_session, bill, table_id, lines):
    """Persist an order directly; lines are (unit_price_cents, quantity, status)."""
    order = Order(table_id=table_id, bill_id=bill.id, total_cents=0)
    order.items = [
        OrderItem(menu_id=5, unit_price_cents=price, quantity=quantity, status=status)
        for price, quantity, status in lines
    ]
    db_session.add(order)
    db_session.flush()
    return order


class TestGetOrOpenBill:

    def test_opens_bill_with_zero_total(self, db_session, bills, seed_table):
        bill = bills.get_or_open_bill(seed_table.id)
        db_session.commit()

        assert bill.status == BillStatus.OPEN
        assert bill.total_cents == 0
        assert len(bill.id) == 36

    def test_returns_existing_open_bill(self, db_session, bills, seed_table):
        first = bills.get_or_open_bill(seed_table.id)
        db_session.commit()

        second = bills.get_or_open_bill(seed_table.id)

        assert second.id == first.id
        assert len(open_bills_for(db_session, seed_table.id)) == 1

    def test_database_refuses_second_open_bill(self, db_session, seed_table):
        """The partial unique index backs the one-open-bill rule."""
        db_session.add(Bill(table_id=seed_table.id, status=BillStatus.OPEN, total_cents=0))
        db_session.commit()

        db_session.add(Bill(table_id=seed_table.id, status=BillStatus.OPEN, total_cents=0))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_paid_bills_do_not_count(self, db_session, bills, seed_table):
        db_session.add(Bill(table_id=seed_table.id, status=BillStatus.PAID, total_cents=500))
        db_session.commit()

        bill = bills.get_or_open_bill(seed_table.id)

        assert bill.status == BillStatus.OPEN
        assert bill.total_cents == 0


class TestTotals:

    def test_apply_delta_increments_in_place(self, db_session, bills, seed_table):
        bill = bills.get_or_open_bill(seed_table.id)
        bills.apply_delta(bill.id, 700)
        updated = bills.apply_delta(bill.id, 300)
        db_session.commit()

        assert updated.total_cents == 1000
        assert db_session.get(Bill, bill.id).total_cents == 1000

    def test_apply_delta_on_paid_bill_is_refused(self, db_session, bills, seed_table):
        bill = Bill(table_id=seed_table.id, status=BillStatus.PAID, total_cents=0)
        db_session.add(bill)
        db_session.commit()

        with pytest.raises(BillNotOpenError):
            bills.apply_delta(bill.id, 100)

    def test_apply_delta_unknown_bill(self, bills):
        with pytest.raises(BillNotFoundError):
            bills.apply_delta("00000000-0000-0000-0000-000000000000", 100)

    def test_calculate_total_skips_cancelled_items(self, db_session, bills, seed_table, seed_menu_item):
        bill = bills.get_or_open_bill(seed_table.id)
        _add_order(
            db_session,
            bill,
            seed_table.id,
            [
                (5000, 2, OrderStatus.PENDING),
                (1200, 1, OrderStatus.CANCELLED),
                (800, 3, OrderStatus.SERVED),
            ],
        )

        assert bills.calculate_total(bill.id) == 12400

    def test_calculate_total_of_empty_bill_is_zero(self, bills, seed_table):
        bill = bills.get_or_open_bill(seed_table.id)

        assert bills.calculate_total(bill.id) == 0

    def test_recompute_overwrites_drifted_total(self, db_session, bills, seed_table, seed_menu_item):
        bill = bills.get_or_open_bill(seed_table.id)
        _add_order(db_session, bill, seed_table.id, [(5000, 1, OrderStatus.PENDING)])
        bill.total_cents = 999_999
        db_session.commit()

        recomputed = bills.recompute(bill.id)
        db_session.commit()

        assert recomputed.total_cents == 5000
        assert db_session.get(Bill, bill.id).total_cents == 5000

    def test_recompute_paid_bill_is_a_conflict(self, db_session, bills, seed_table):
        bill = Bill(table_id=seed_table.id, status=BillStatus.PAID, total_cents=0)
        db_session.add(bill)
        db_session.commit()

        with pytest.raises(BillNotOpenError):
            bills.recompute(bill.id)


class TestClose:

    def test_close_marks_paid(self, db_session, bills, seed_table):
        bill = bills.get_or_open_bill(seed_table.id)

        closed = bills.close(bill.id, "CARD")
        db_session.commit()

        assert closed.status == BillStatus.PAID
        assert closed.payment_method == "CARD"
        assert closed.closed_at is not None

    def test_double_close_is_a_conflict(self, db_session, bills, seed_table):
        bill = bills.get_or_open_bill(seed_table.id)
        bills.close(bill.id, "CASH")
        db_session.commit()

        with pytest.raises(BillNotOpenError) as exc:
            bills.close(bill.id, "CASH")

        assert exc.value.status_code == 409


class TestGetTableBill:

    def test_lists_all_items_including_cancelled(
        self, status_machine, bills, place_order, seed_table
    ):
        first = place_order(quantity=2)
        second = place_order(quantity=1)
        status_machine.transition_item(second.items[0].id, OrderStatus.CANCELLED)

        detail = bills.get_table_bill(seed_table.id)

        assert detail.id == first.bill_id
        assert detail.total_cents == 10000
        assert [item.status for item in detail.items] == [
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
        ]

    def test_no_open_bill_is_empty(self, bills, seed_table):
        detail = bills.get_table_bill(seed_table.id)

        assert detail.id is None
        assert detail.status is None
        assert detail.table_id == seed_table.id
        assert detail.total_cents == 0
        assert detail.items == []

    def test_unknown_table(self, bills):
        with pytest.raises(NotFoundError):
            bills.get_table_bill(999)
