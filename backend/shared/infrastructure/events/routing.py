"""
Event routing: which channels receive each event type.
"""

from __future__ import annotations

from .channels import channel_kitchen, channel_staff, channel_table
from .event_schema import Event
from .event_types import (
    ITEM_STATUS_CHANGED,
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    TABLE_CLOSED,
    TABLE_UPDATED,
)

# Event types the kitchen display cares about
_KITCHEN_EVENTS = frozenset({ORDER_CREATED, ORDER_STATUS_CHANGED, ITEM_STATUS_CHANGED})

# Event types forwarded to the customer's table channel
_TABLE_EVENTS = frozenset({
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ITEM_STATUS_CHANGED,
    TABLE_CLOSED,
    TABLE_UPDATED,
})


def channels_for(event: Event) -> list[str]:
    """
    Channels an event is fanned out to.

    Staff always receive everything; the kitchen only order and item events;
    the table channel receives what concerns that table.
    """
    channels = [channel_staff()]
    if event.type in _KITCHEN_EVENTS:
        channels.append(channel_kitchen())
    if event.type in _TABLE_EVENTS:
        channels.append(channel_table(event.table_id))
    return channels
