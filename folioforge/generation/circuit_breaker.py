"""Per-model circuit breaker for generation calls.

A generation request can fan out into an initial call plus several
continuation calls. When the provider is down every one of those calls would
wait out the full request timeout; the breaker short-circuits them instead.

States:
  CLOSED    -- calls pass through
  OPEN      -- provider considered down, calls fail fast
  HALF_OPEN -- cooldown expired, a single trial call is let through

Breakers are shared process-wide, one per model string, and guarded by a lock
because FastAPI may serve requests from several threads.
"""

import logging
import threading
import time
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_COOLDOWN_SECONDS = 60.0


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """Raised instead of calling a model whose circuit is open."""

    def __init__(self, model: str, retry_after: float):
        self.model = model
        self.retry_after = retry_after
        super().__init__(
            f"Generation circuit OPEN for '{model}'. Retry after {retry_after:.0f}s."
        )


class CircuitBreaker:
    """Consecutive-failure breaker for one generation model."""

    def __init__(
        self,
        model: str,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
    ) -> None:
        self.model = model
        self._failure_threshold = max(failure_threshold, 1)
        self._cooldown_seconds = cooldown_seconds
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failures

    def before_call(self) -> None:
        """Raise ``CircuitBreakerOpen`` unless a call may go out now."""
        with self._lock:
            if self._state is not CircuitState.OPEN:
                return
            waited = time.monotonic() - self._opened_at
            if waited < self._cooldown_seconds:
                raise CircuitBreakerOpen(self.model, self._cooldown_seconds - waited)
            self._state = CircuitState.HALF_OPEN
            logger.info("Generation circuit %s: OPEN -> HALF_OPEN", self.model)

    def record_success(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                logger.info("Generation circuit %s: HALF_OPEN -> CLOSED", self.model)
            self._state = CircuitState.CLOSED
            self._failures = 0

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._state is CircuitState.HALF_OPEN:
                self._trip("trial call failed")
            elif self._state is CircuitState.CLOSED and self._failures >= self._failure_threshold:
                self._trip(f"{self._failures} consecutive failures")

    def _trip(self, reason: str) -> None:
        previous = self._state
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()
        logger.warning(
            "Generation circuit %s: %s -> OPEN (%s)",
            self.model, previous.name, reason,
        )


# ---------------------------------------------------------------------------
# Process-wide registry, one breaker per model string
# ---------------------------------------------------------------------------

_breakers: dict[str, CircuitBreaker] = {}
_registry_lock = threading.Lock()


def get_breaker(
    model: str,
    failure_threshold: Optional[int] = None,
    cooldown_seconds: Optional[float] = None,
) -> CircuitBreaker:
    """Return the breaker for *model*, creating it on first use.

    Thresholds only apply at creation; later callers share the existing breaker.
    """
    with _registry_lock:
        breaker = _breakers.get(model)
        if breaker is None:
            breaker = CircuitBreaker(
                model,
                failure_threshold=failure_threshold or DEFAULT_FAILURE_THRESHOLD,
                cooldown_seconds=(
                    DEFAULT_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
                ),
            )
            _breakers[model] = breaker
        return breaker


def reset_all() -> None:
    """Forget every breaker (tests)."""
    with _registry_lock:
        _breakers.clear()
