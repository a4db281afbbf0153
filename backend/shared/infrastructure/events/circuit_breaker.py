"""
Circuit breaker guarding floor notifications.

Notifications are published after the order or bill change has committed,
so a dead Redis must not add socket timeouts to every request. After
``failure_threshold`` consecutive failed publishes the breaker opens and
publishes are skipped until ``recovery_timeout`` has passed; then a single
trial publish decides whether it closes again.
"""

from __future__ import annotations

import threading
import time
from enum import Enum

from shared.config.settings import settings
from shared.config.logging import events_logger as logger


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class EventCircuitBreaker:
    """Thread-safe breaker shared by every request thread of the process."""

    def __init__(self, failure_threshold: int = 5, recovery_timeout: float = 30.0):
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._lock = threading.Lock()

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = 0.0
        self._trial_in_flight = False
        self._rejected_count = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    def can_execute(self) -> bool:
        """True when a publish may be attempted now."""
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return True

            if (
                self._state == CircuitState.OPEN
                and time.monotonic() - self._opened_at >= self._recovery_timeout
            ):
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
                logger.info("Notification breaker half-open, sending trial publish")

            # Only one trial publish while half-open
            if self._state == CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return True

            self._rejected_count += 1
            return False

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            if (
                self._state == CircuitState.HALF_OPEN
                or self._failure_count >= self._failure_threshold
            ):
                if self._state != CircuitState.OPEN:
                    logger.error(
                        "Notification breaker OPEN",
                        failure_count=self._failure_count,
                        threshold=self._failure_threshold,
                    )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()

    def record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("Notification breaker recovered to CLOSED")
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._trial_in_flight = False

    def get_stats(self) -> dict:
        """Snapshot for the detailed health check."""
        with self._lock:
            return {
                "state": self._state.value,
                "failure_count": self._failure_count,
                "rejected_count": self._rejected_count,
            }


def build_event_circuit_breaker() -> EventCircuitBreaker:
    """Breaker tuned from settings."""
    return EventCircuitBreaker(
        failure_threshold=settings.notifications_breaker_threshold,
        recovery_timeout=settings.notifications_breaker_recovery_seconds,
    )
