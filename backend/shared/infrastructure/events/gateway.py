"""
Notification gateways.

Services hand committed-state events to a NotificationGateway; the gateway
owns the transport. ``notify`` never raises: by the time an event is emitted
the transaction has committed, so a transport failure is logged and the
request still succeeds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

import redis

from shared.config.logging import events_logger as logger
from shared.config.settings import Settings
from .circuit_breaker import EventCircuitBreaker, build_event_circuit_breaker
from .event_schema import Event
from .publisher import publish_event
from .redis_pool import close_redis_sync_client, get_redis_sync_client
from .routing import channels_for


class NotificationGateway(ABC):
    """Fan-out of floor events to staff, kitchen and table subscribers."""

    @abstractmethod
    def publish(self, event: Event) -> None:
        """Deliver one event. May raise on transport errors."""

    def close(self) -> None:
        """Release transport resources."""

    def notify(self, events: Iterable[Event]) -> None:
        """Publish events in order, logging (not raising) failures."""
        for event in events:
            try:
                self.publish(event)
            except (redis.RedisError, ValueError) as e:
                logger.error(
                    "Failed to publish event",
                    event_type=event.type,
                    table_id=event.table_id,
                    error=str(e),
                    exc_info=True,
                )


class RedisNotificationGateway(NotificationGateway):
    """Publishes events to Redis pub/sub channels."""

    def __init__(
        self,
        client_factory: Callable[[], redis.Redis] = get_redis_sync_client,
        circuit_breaker: EventCircuitBreaker | None = None,
    ):
        self._client_factory = client_factory
        self._circuit_breaker = circuit_breaker or build_event_circuit_breaker()

    @property
    def circuit_breaker(self) -> EventCircuitBreaker:
        return self._circuit_breaker

    def publish(self, event: Event) -> None:
        client = self._client_factory()
        for channel in channels_for(event):
            receivers = publish_event(client, channel, event, self._circuit_breaker)
            logger.debug(
                "Event published",
                event_type=event.type,
                channel=channel,
                receivers=receivers,
            )

    def close(self) -> None:
        close_redis_sync_client()


class LoggingNotificationGateway(NotificationGateway):
    """Writes events to the log. Used in development without Redis."""

    def publish(self, event: Event) -> None:
        logger.info(
            "Event",
            event_type=event.type,
            table_id=event.table_id,
            channels=channels_for(event),
            entity=event.entity,
        )


def build_notification_gateway(settings: Settings) -> NotificationGateway:
    """Gateway selected by the NOTIFICATIONS_BACKEND setting."""
    if settings.notifications_backend == "log":
        return LoggingNotificationGateway()
    return RedisNotificationGateway()
