"""
FastAPI dependency providers.

Domain services are built per request around the request's session. The
notification gateway is process-wide and lives on ``app.state``.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from rest_api.services.domain import (
    BillAggregator,
    ItemStatusStateMachine,
    MenuPriceOracle,
    OrderLifecycleManager,
    SqlMenuPriceOracle,
    TableRegistry,
)
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import get_db
from shared.infrastructure.events import NotificationGateway


def get_notifier(request: Request) -> NotificationGateway:
    return request.app.state.notifier


def get_table_registry(
    db: Session = Depends(get_db),
    notifier: NotificationGateway = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> TableRegistry:
    return TableRegistry(db, notifier, settings)


def get_bill_aggregator(db: Session = Depends(get_db)) -> BillAggregator:
    return BillAggregator(db)


def get_menu_oracle(db: Session = Depends(get_db)) -> MenuPriceOracle:
    return SqlMenuPriceOracle(db)


def get_status_machine(
    db: Session = Depends(get_db),
    tables: TableRegistry = Depends(get_table_registry),
    bills: BillAggregator = Depends(get_bill_aggregator),
    notifier: NotificationGateway = Depends(get_notifier),
) -> ItemStatusStateMachine:
    return ItemStatusStateMachine(db, tables, bills, notifier)


def get_order_lifecycle(
    db: Session = Depends(get_db),
    tables: TableRegistry = Depends(get_table_registry),
    bills: BillAggregator = Depends(get_bill_aggregator),
    menu: MenuPriceOracle = Depends(get_menu_oracle),
    notifier: NotificationGateway = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> OrderLifecycleManager:
    return OrderLifecycleManager(db, tables, bills, menu, notifier, settings)
