"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATIONS_BACKEND", "log")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DB_TRANSACTION_RETRY_DELAY", "0.001")
os.environ.setdefault("REDIS_PUBLISH_RETRY_DELAY", "0.001")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.core.dependencies import get_notifier
from rest_api.main import app
from rest_api.models import Base, Bill, MenuItem, OrderItem, Order, Table
from rest_api.services.domain import (
    BillAggregator,
    ItemStatusStateMachine,
    OrderLifecycleManager,
    SqlMenuPriceOracle,
    TableRegistry,
)
from shared.config.constants import BillStatus, OrderStatus
from shared.infrastructure.db import build_engine, get_db
from shared.infrastructure.events import NotificationGateway
from shared.utils.schemas import OrderItemInput


class RecordingNotificationGateway(NotificationGateway):
    """Keeps published events in memory so tests can assert on them."""

    def __init__(self):
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


def make_engine(url: str = "sqlite://", **kwargs):
    """SQLite engine with the application's locking setup and all tables."""
    if url == "sqlite://":
        kwargs.setdefault("poolclass", StaticPool)
    engine = build_engine(url, **kwargs)
    Base.metadata.create_all(bind=engine)
    return engine


def build_services(db, notifier):
    """Wire the domain services the same way the request dependencies do."""
    tables = TableRegistry(db, notifier)
    bills = BillAggregator(db)
    menu = SqlMenuPriceOracle(db)
    machine = ItemStatusStateMachine(db, tables, bills, notifier)
    lifecycle = OrderLifecycleManager(db, tables, bills, menu, notifier)
    return tables, bills, machine, lifecycle


def open_bills_for(db, table_id: int) -> list[Bill]:
    return db.scalars(
        select(Bill).where(Bill.table_id == table_id, Bill.status == BillStatus.OPEN)
    ).all()


def expected_bill_total(db, bill_id: str) -> int:
    """Sum of non-cancelled items, computed straight from the persisted rows."""
    items = db.scalars(
        select(OrderItem).join(Order, OrderItem.order_id == Order.id).where(Order.bill_id == bill_id)
    ).all()
    return sum(
        item.unit_price_cents * item.quantity
        for item in items
        if item.status != OrderStatus.CANCELLED
    )


def count_rows(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test."""
    engine = make_engine()
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def notifier():
    return RecordingNotificationGateway()


@pytest.fixture
def tables(db_session, notifier):
    return TableRegistry(db_session, notifier)


@pytest.fixture
def bills(db_session):
    return BillAggregator(db_session)


@pytest.fixture
def status_machine(db_session, tables, bills, notifier):
    return ItemStatusStateMachine(db_session, tables, bills, notifier)


@pytest.fixture
def lifecycle(db_session, tables, bills, notifier):
    return OrderLifecycleManager(db_session, tables, bills, SqlMenuPriceOracle(db_session), notifier)


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_table(db_session):
    """Available, empty table T1."""
    table = Table(name="T1")
    db_session.add(table)
    db_session.commit()
    return table


@pytest.fixture
def seed_menu_item(db_session):
    """Menu item 5 priced at 50.00."""
    item = MenuItem(id=5, name="Milanesa", price_cents=5000)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def seed_second_menu_item(db_session):
    item = MenuItem(id=7, name="Flan", price_cents=1200)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def place_order(lifecycle, seed_table, seed_menu_item):
    """Create an order of ``quantity`` x menu item 5 at T1."""

    def _place(quantity: int = 2, table_id: int | None = None, menu_id: int = 5):
        return lifecycle.create_order(
            table_id or seed_table.id,
            [OrderItemInput(menu_id=menu_id, quantity=quantity)],
        )

    return _place


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture(scope="function")
def client(db_session, notifier):
    """
    Test client with the database session and notification gateway overridden.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
