"""
Event Schema.

Defines the Event dataclass for all floor events.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any

from .event_types import ALL_EVENT_TYPES


@dataclass
class Event:
    """
    Unified event schema.

    The 'entity' field carries the same data the triggering operation
    returned (order, item or table snapshot), already JSON-serializable.
    """

    type: str
    table_id: int
    entity: dict[str, Any] = field(default_factory=dict)
    ts: str | None = None
    v: int = 1  # Schema version for future compatibility

    def __post_init__(self) -> None:
        """Reject malformed events before they reach a transport."""
        if not self.type or not isinstance(self.type, str):
            raise ValueError("Event type must be a non-empty string")

        if self.type not in ALL_EVENT_TYPES:
            raise ValueError(f"Unknown event type: {self.type}")

        if not isinstance(self.table_id, int) or isinstance(self.table_id, bool) or self.table_id <= 0:
            raise ValueError("Event table_id must be a positive integer")

        if self.entity is not None and not isinstance(self.entity, dict):
            raise ValueError("Event entity must be a dict or None")

        if self.ts is None:
            self.ts = datetime.now(timezone.utc).isoformat()

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        data = asdict(self)
        data["entity"] = data["entity"] or {}
        return json.dumps(data, ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        """Deserialize event from JSON string (validated in __post_init__)."""
        data = json.loads(json_str)
        return cls(**data)
