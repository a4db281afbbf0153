"""
Core Event Publishing with Retry and Validation.
"""

from __future__ import annotations

import time

import redis

from shared.config.settings import settings
from shared.config.logging import get_logger
from shared.utils.backoff import calculate_retry_delay_with_jitter
from .event_types import MAX_EVENT_SIZE
from .event_schema import Event
from .circuit_breaker import EventCircuitBreaker

logger = get_logger(__name__)


def _validate_event_size(event_json: str, event_type: str) -> None:
    """Raise ValueError when an event exceeds MAX_EVENT_SIZE."""
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(
            f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes"
        )


def publish_event(
    redis_client: redis.Redis,
    channel: str,
    event: Event,
    circuit_breaker: EventCircuitBreaker,
) -> int:
    """
    Publish an event to a Redis channel.

    Retries with exponential backoff and jitter; the circuit breaker makes
    publishes fail fast while Redis is down.

    Returns:
        Number of subscribers that received the message.
        Returns 0 if the circuit breaker is open.

    Raises:
        ValueError: If the event is too large.
        redis.RedisError: If all retries fail.
    """
    event_json = event.to_json()
    _validate_event_size(event_json, event.type)

    if not circuit_breaker.can_execute():
        logger.warning(
            "Event publish skipped - circuit breaker open",
            channel=channel,
            event_type=event.type,
        )
        return 0

    max_retries = max(settings.redis_publish_max_retries, 1)
    last_error: redis.RedisError | None = None
    for attempt in range(max_retries):
        try:
            result = redis_client.publish(channel, event_json)
            circuit_breaker.record_success()
            return result
        except redis.RedisError as e:
            last_error = e
            if attempt < max_retries - 1:
                delay = calculate_retry_delay_with_jitter(
                    attempt, settings.redis_publish_retry_delay
                )
                logger.warning(
                    "Redis publish failed, retrying",
                    channel=channel,
                    event_type=event.type,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                time.sleep(delay)
            else:
                logger.error(
                    "Redis publish failed after all retries",
                    channel=channel,
                    event_type=event.type,
                    error=str(e),
                )

    circuit_breaker.record_failure()
    raise last_error  # type: ignore[misc]
