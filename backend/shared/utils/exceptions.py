"""
Centralized HTTP exceptions for consistent error handling.

Every exception carries a stable machine-readable ``code`` next to the HTTP
status, so callers can branch on the error kind without parsing messages.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError, ConflictError

    raise NotFoundError("Table", table_id)
    raise ValidationError("Order must contain at least one item")
    raise ConflictError("Table has unserved items", table_id=table_id)
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    code: str = "ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, code=self.code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("MenuItem", 5)
        raise NotFoundError("Open bill", table_id=table_id)
    """

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class TableNotFoundError(NotFoundError):
    """Table does not exist or has been deleted."""

    def __init__(self, table_id: int | None = None, **log_context: Any):
        super().__init__("Table", table_id, **log_context)


class BillNotFoundError(NotFoundError):
    """Bill does not exist."""

    def __init__(self, bill_id: str | None = None, **log_context: Any):
        super().__init__("Bill", bill_id, **log_context)


class OrderNotFoundError(NotFoundError):
    """Order does not exist."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class OrderItemNotFoundError(NotFoundError):
    """Order item does not exist."""

    def __init__(self, item_id: int | None = None, **log_context: Any):
        super().__init__("Order item", item_id, **log_context)


class MenuItemNotFoundError(NotFoundError):
    """Menu item does not exist or has been deleted."""

    def __init__(self, menu_id: int | None = None, **log_context: Any):
        super().__init__("Menu item", menu_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Quantity must be at least 1", field="quantity", value=0)
    """

    code = "VALIDATION_ERROR"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class TableNotAvailableError(ValidationError):
    """Table is marked unavailable and cannot take new orders."""

    def __init__(self, table_id: int, **log_context: Any):
        self.table_id = table_id
        super().__init__("Table not available", table_id=table_id, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Table name already in use", name=name)
    """

    code = "CONFLICT"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Requested status change is not in the transition table."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        self.from_status = from_status
        self.to_status = to_status
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


class UnservedItemsError(ConflictError):
    """Table still has items that were not served, completed or cancelled."""

    def __init__(self, table_id: int, unserved_count: int, **log_context: Any):
        self.table_id = table_id
        self.unserved_count = unserved_count
        super().__init__(
            "Table has unserved items",
            table_id=table_id,
            unserved_count=unserved_count,
            **log_context,
        )


class BillNotOpenError(ConflictError):
    """Bill has already been closed."""

    def __init__(self, bill_id: str, current_status: str, **log_context: Any):
        self.bill_id = bill_id
        super().__init__(
            f"Bill {bill_id} is {current_status}, expected OPEN",
            bill_id=bill_id,
            current_status=current_status,
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    """Entity with the same identifier already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to recompute bill", bill_id=bill_id)
    """

    code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed after all retries."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
