"""
Event Type Constants.

Defines all event types the floor emits after a committed state change.
"""

from shared.config.settings import settings

# =============================================================================
# Order lifecycle events
# =============================================================================

ORDER_CREATED = "order.created"
ORDER_STATUS_CHANGED = "order.status_changed"
ITEM_STATUS_CHANGED = "item.status_changed"

# =============================================================================
# Table events
# =============================================================================

TABLE_CLOSED = "table.closed"  # Bill paid and table reset
TABLE_UPDATED = "table.updated"  # Availability, occupancy or call-staff flag changed

ALL_EVENT_TYPES = frozenset({
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ITEM_STATUS_CHANGED,
    TABLE_CLOSED,
    TABLE_UPDATED,
})

# =============================================================================
# Size limits
# =============================================================================

MAX_EVENT_SIZE = settings.max_event_size
