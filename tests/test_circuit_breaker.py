"""Tests for the generation circuit breaker state machine.

  CLOSED -> OPEN       after threshold consecutive failures
  OPEN -> HALF_OPEN    once the cooldown has passed
  HALF_OPEN -> CLOSED  on a successful trial call
  HALF_OPEN -> OPEN    on a failed trial call
"""

import time

import pytest

from folioforge.generation.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerOpen,
    CircuitState,
    get_breaker,
    reset_all,
)


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


class TestCircuitBreakerStates:

    def test_starts_closed(self):
        assert CircuitBreaker("model").state == CircuitState.CLOSED

    def test_stays_closed_under_threshold(self):
        cb = CircuitBreaker("model", failure_threshold=3)
        cb.record_failure()
        cb.record_failure()
        assert cb.state == CircuitState.CLOSED
        cb.before_call()

    def test_opens_at_threshold(self):
        cb = CircuitBreaker("model", failure_threshold=3)
        for _ in range(3):
            cb.record_failure()
        assert cb.state == CircuitState.OPEN

    def test_open_blocks_calls(self):
        cb = CircuitBreaker("model", failure_threshold=1, cooldown_seconds=60)
        cb.record_failure()
        with pytest.raises(CircuitBreakerOpen) as exc_info:
            cb.before_call()
        assert exc_info.value.model == "model"
        assert 0 < exc_info.value.retry_after <= 60

    def test_success_resets_failure_count(self):
        cb = CircuitBreaker("model", failure_threshold=3)
        cb.record_failure()
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 1

    def test_half_open_after_cooldown(self):
        cb = CircuitBreaker("model", failure_threshold=1, cooldown_seconds=0.01)
        cb.record_failure()
        time.sleep(0.02)
        cb.before_call()
        assert cb.state == CircuitState.HALF_OPEN

    def test_half_open_closes_on_success(self):
        cb = CircuitBreaker("model", failure_threshold=1, cooldown_seconds=0.01)
        cb.record_failure()
        time.sleep(0.02)
        cb.before_call()
        cb.record_success()
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    def test_half_open_reopens_on_failure(self):
        cb = CircuitBreaker("model", failure_threshold=5, cooldown_seconds=0.01)
        for _ in range(5):
            cb.record_failure()
        time.sleep(0.02)
        cb.before_call()
        cb.record_failure()
        assert cb.state == CircuitState.OPEN

    def test_zero_cooldown_allows_immediate_trial_call(self):
        cb = CircuitBreaker("model", failure_threshold=1, cooldown_seconds=0)
        cb.record_failure()
        cb.before_call()
        assert cb.state == CircuitState.HALF_OPEN


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_get_breaker_creates_new(self):
        breaker = get_breaker("model-a")
        assert breaker.model == "model-a"
        assert breaker.state == CircuitState.CLOSED

    def test_same_model_same_instance(self):
        assert get_breaker("model-a") is get_breaker("model-a")

    def test_different_models_different_breakers(self):
        assert get_breaker("model-a") is not get_breaker("model-b")

    def test_thresholds_apply_on_creation(self):
        breaker = get_breaker("model-a", failure_threshold=1)
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN

    def test_reset_all_clears_registry(self):
        first = get_breaker("model-a", failure_threshold=1)
        first.record_failure()
        reset_all()
        second = get_breaker("model-a")
        assert second is not first
        assert second.state == CircuitState.CLOSED
