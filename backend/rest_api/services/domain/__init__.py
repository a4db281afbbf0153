"""
Domain Services - application layer of the order-to-bill engine.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity)

Components take their session and collaborators in the constructor and are
built per request (see rest_api.core.dependencies).

Usage:
    from rest_api.services.domain import OrderLifecycleManager

    manager = OrderLifecycleManager(db, tables, bills, menu, notifier)
    order = manager.create_order(table_id, items)
"""

from .menu_oracle import MenuPriceOracle, SqlMenuPriceOracle
from .table_registry import TableRegistry
from .bill_aggregator import BillAggregator
from .status_machine import ItemStatusStateMachine
from .order_lifecycle import OrderLifecycleManager

__all__ = [
    "MenuPriceOracle",
    "SqlMenuPriceOracle",
    "TableRegistry",
    "BillAggregator",
    "ItemStatusStateMachine",
    "OrderLifecycleManager",
]
