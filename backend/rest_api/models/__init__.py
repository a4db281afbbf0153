"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin, AuditMixin
- table: Table
- catalog: MenuItem
- billing: Bill
- order: Order, OrderItem
"""

# Base classes
from .base import Base, TimestampMixin, AuditMixin

# Floor
from .table import Table

# Menu (read-only for the order flow)
from .catalog import MenuItem

# Billing
from .billing import Bill

# Orders
from .order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditMixin",
    "Table",
    "MenuItem",
    "Bill",
    "Order",
    "OrderItem",
]
