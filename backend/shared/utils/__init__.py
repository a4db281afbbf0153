"""
Utilities module: Exceptions, schemas, retry backoff.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    InvalidTransitionError,
    DatabaseError,
)
from shared.utils.schemas import ErrorResponse
from shared.utils.backoff import calculate_retry_delay_with_jitter

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "InvalidTransitionError",
    "DatabaseError",
    # schemas
    "ErrorResponse",
    # backoff
    "calculate_retry_delay_with_jitter",
]
