# live_scoring/services/commentary/circuit_breaker.py

"""
Circuit Breaker

Stops calling the commentary endpoint for a while after repeated failures so
a dead upstream costs nothing more than a state check per event.
"""

import logging
import threading
import time
from enum import Enum
from typing import Any, Optional, Type

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"  # one trial call allowed


class CircuitBreakerError(Exception):
    """Raised when the circuit is open and the call was not attempted."""
    pass


class CircuitBreaker:
    """
    Thread-safe circuit breaker around a single upstream.

    After ``failure_threshold`` consecutive failures of ``expected_exception``
    the circuit opens. Once ``recovery_timeout`` seconds have passed the next
    call is let through as a trial; success closes the circuit, failure opens
    it again.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: Type[Exception] = Exception
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def _allow_call(self) -> bool:
        with self._lock:
            if self._state is CircuitState.OPEN:
                if time.monotonic() - self._opened_at < self.recovery_timeout:
                    return False
                self._state = CircuitState.HALF_OPEN
                logger.info("🔌 Commentary circuit half-open, trying one call")
            return True

    def _on_success(self):
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                logger.info("🔌 Commentary circuit closed again")
            self._state = CircuitState.CLOSED
            self._consecutive_failures = 0
            self._opened_at = None

    def _on_failure(self):
        with self._lock:
            self._consecutive_failures += 1
            if self._state is CircuitState.HALF_OPEN or self._consecutive_failures >= self.failure_threshold:
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                logger.warning(f"🔌 Commentary circuit opened after {self._consecutive_failures} failures")

    def call(self, func, *args, **kwargs) -> Any:
        """
        Run ``func`` through the breaker.

        Raises CircuitBreakerError without calling ``func`` while the circuit
        is open; ``expected_exception`` failures are counted and re-raised.
        """
        if not self._allow_call():
            raise CircuitBreakerError(f"Circuit breaker is {self._state.value}")

        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result
