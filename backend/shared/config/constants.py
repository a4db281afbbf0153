"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS

    if status == OrderStatus.PENDING:
        ...

    if validate_order_transition(order.status, new_status):
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """
    Status shared by orders and order items.

    Progress is strictly forward: PENDING -> COOKING -> READY -> SERVED -> COMPLETED.
    CANCELLED can be reached from any state before SERVED.
    """

    PENDING: Final[str] = "PENDING"
    COOKING: Final[str] = "COOKING"
    READY: Final[str] = "READY"
    SERVED: Final[str] = "SERVED"
    COMPLETED: Final[str] = "COMPLETED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, COOKING, READY, SERVED, COMPLETED, CANCELLED]

    # Status groups
    # Orders the kitchen and floor staff still have to act on
    ACTIVE: Final[list[str]] = [PENDING, COOKING, READY]
    # Orders that keep the table occupied
    OCCUPYING: Final[list[str]] = [PENDING, COOKING, READY, SERVED]
    # Items in these states never block a table close
    CLOSABLE: Final[list[str]] = [SERVED, COMPLETED, CANCELLED]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


class BillStatus:
    """Bill status constants."""

    OPEN: Final[str] = "OPEN"
    PAID: Final[str] = "PAID"

    ALL: Final[list[str]] = [OPEN, PAID]


class PaymentMethod:
    """Payment method constants."""

    CASH: Final[str] = "CASH"
    CARD: Final[str] = "CARD"

    ALL: Final[list[str]] = [CASH, CARD]


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order/item status transitions (from -> [allowed to states])
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.COOKING, OrderStatus.CANCELLED],
    OrderStatus.COOKING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.SERVED, OrderStatus.CANCELLED],
    OrderStatus.SERVED: [OrderStatus.COMPLETED],
    OrderStatus.COMPLETED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

# Position of each forward status; CANCELLED is off the forward path
_PROGRESS_RANK: Final[dict[str, int]] = {
    OrderStatus.PENDING: 0,
    OrderStatus.COOKING: 1,
    OrderStatus.READY: 2,
    OrderStatus.SERVED: 3,
    OrderStatus.COMPLETED: 4,
}


def validate_order_transition(current_status: str, target_status: str) -> bool:
    """
    Check whether moving from current_status to target_status is allowed.

    Returns False for unknown statuses. Same-status requests are not transitions
    and return False; callers treat them as no-ops before asking.
    """
    return target_status in ORDER_TRANSITIONS.get(current_status, [])


def is_progressed_past(current_status: str, target_status: str) -> bool:
    """
    True when current_status is already at or beyond target_status on the
    forward path. CANCELLED is never considered progressed.
    """
    if current_status not in _PROGRESS_RANK or target_status not in _PROGRESS_RANK:
        return False
    return _PROGRESS_RANK[current_status] >= _PROGRESS_RANK[target_status]


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1

    # Price limits (in cents)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 100
    MAX_NOTE_LENGTH: Final[int] = 500
