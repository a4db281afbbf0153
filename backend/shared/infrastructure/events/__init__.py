"""
Event System for real-time notifications.

This package provides:
- Event schema and validation
- Redis connection pool management
- Event publishing with retry and circuit breaker
- Channel naming and routing
- Notification gateways (Redis and logging)

Modules:
- circuit_breaker.py: Circuit breaker pattern for resilience
- event_types.py: Event type constants
- event_schema.py: Event dataclass with validation
- channels.py: Channel naming functions
- routing.py: Event type to channel routing
- redis_pool.py: Connection pool management and health check
- publisher.py: Core publish_event with retry
- gateway.py: NotificationGateway interface and implementations
"""

# =============================================================================
# Circuit Breaker
# =============================================================================

from .circuit_breaker import (
    CircuitState,
    EventCircuitBreaker,
    build_event_circuit_breaker,
)

# =============================================================================
# Event Types
# =============================================================================

from .event_types import (
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ITEM_STATUS_CHANGED,
    TABLE_CLOSED,
    TABLE_UPDATED,
    ALL_EVENT_TYPES,
    MAX_EVENT_SIZE,
)

# =============================================================================
# Event Schema
# =============================================================================

from .event_schema import Event

# =============================================================================
# Channels
# =============================================================================

from .channels import channel_staff, channel_kitchen, channel_table
from .routing import channels_for

# =============================================================================
# Redis Pool
# =============================================================================

from .redis_pool import (
    get_redis_sync_client,
    close_redis_sync_client,
    check_redis_sync_health,
)

# =============================================================================
# Publishing
# =============================================================================

from .publisher import publish_event
from .gateway import (
    NotificationGateway,
    RedisNotificationGateway,
    LoggingNotificationGateway,
    build_notification_gateway,
)

__all__ = [
    # Circuit Breaker
    "CircuitState",
    "EventCircuitBreaker",
    "build_event_circuit_breaker",
    # Event Types
    "ORDER_CREATED",
    "ORDER_STATUS_CHANGED",
    "ITEM_STATUS_CHANGED",
    "TABLE_CLOSED",
    "TABLE_UPDATED",
    "ALL_EVENT_TYPES",
    "MAX_EVENT_SIZE",
    # Event Schema
    "Event",
    # Channels
    "channel_staff",
    "channel_kitchen",
    "channel_table",
    "channels_for",
    # Redis Pool
    "get_redis_sync_client",
    "close_redis_sync_client",
    "check_redis_sync_health",
    # Publishing
    "publish_event",
    "NotificationGateway",
    "RedisNotificationGateway",
    "LoggingNotificationGateway",
    "build_notification_gateway",
]
