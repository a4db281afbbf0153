"""
Redis Channel Naming.
"""

from __future__ import annotations

CHANNEL_STAFF = "floor:staff"
CHANNEL_KITCHEN = "floor:kitchen"


def _validate_positive_id(id_value: int, name: str) -> None:
    if not isinstance(id_value, int) or id_value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {id_value}")


def channel_staff() -> str:
    """Channel for floor staff (waiters, managers)."""
    return CHANNEL_STAFF


def channel_kitchen() -> str:
    """Channel for the kitchen display."""
    return CHANNEL_KITCHEN


def channel_table(table_id: int) -> str:
    """Channel for the customer device at a table."""
    _validate_positive_id(table_id, "table_id")
    return f"table:{table_id}"
