"""
guildjournal/tests/test_fallback.py

Tests for the circuit breaker and FallbackHandler.
"""

from unittest.mock import AsyncMock

import pytest

from guildjournal.exceptions import CollaboratorError
from guildjournal.integration.fallback import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
    FallbackHandler,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCircuitBreaker:
    """Test CircuitBreaker state transitions."""

    def create_test_breaker(self, clock=None):
        config = CircuitBreakerConfig(failure_threshold=2, timeout_seconds=10.0)
        return CircuitBreaker("test", config, clock=clock or FakeClock())

    def test_starts_closed(self):
        """Test a new breaker is closed and available."""
        breaker = self.create_test_breaker()
        assert breaker.state == CircuitState.CLOSED
        assert breaker.is_available()

    def test_opens_after_threshold(self):
        """Test the breaker opens after failure_threshold failures."""
        breaker = self.create_test_breaker()
        breaker.record_failure()
        assert breaker.state == CircuitState.CLOSED
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        assert not breaker.is_available()

    def test_half_open_after_timeout(self):
        """Test the breaker lets one call through after the timeout."""
        clock = FakeClock()
        breaker = self.create_test_breaker(clock)
        breaker.record_failure()
        breaker.record_failure()

        clock.now += 11
        assert breaker.state == CircuitState.HALF_OPEN
        assert breaker.is_available()
        assert not breaker.is_available()

    def test_half_open_success_closes(self):
        """Test a successful trial call closes the circuit."""
        clock = FakeClock()
        breaker = self.create_test_breaker(clock)
        breaker.record_failure()
        breaker.record_failure()
        clock.now += 11
        breaker.is_available()

        breaker.record_success()
        assert breaker.state == CircuitState.CLOSED
        # counter was cleared, so one new failure keeps it closed
        breaker.record_failure()
        assert breaker.state == CircuitState.CLOSED

    def test_half_open_failure_reopens(self):
        """Test a failed trial call reopens the circuit."""
        clock = FakeClock()
        breaker = self.create_test_breaker(clock)
        breaker.record_failure()
        breaker.record_failure()
        clock.now += 11
        breaker.is_available()

        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN


class TestFallbackHandler:
    """Test FallbackHandler.call()."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        """Test a successful call returns its result."""
        handler = FallbackHandler()
        func = AsyncMock(return_value="answer")
        assert await handler.call("op", func, fallback="fallback") == "answer"

    @pytest.mark.asyncio
    async def test_collaborator_error_returns_fallback(self):
        """Test CollaboratorError is replaced by the fallback value."""
        handler = FallbackHandler()
        func = AsyncMock(side_effect=CollaboratorError("down"))
        assert await handler.call("op", func, fallback="fallback") == "fallback"
        func.assert_awaited_once()
        assert handler.get_stats() == {"op": "CLOSED"}

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        """Test non-collaborator errors are not swallowed."""
        handler = FallbackHandler()
        func = AsyncMock(side_effect=KeyError("bug"))
        with pytest.raises(KeyError):
            await handler.call("op", func, fallback="fallback")

    @pytest.mark.asyncio
    async def test_open_circuit_skips_call(self):
        """Test an open circuit returns the fallback without calling."""
        handler = FallbackHandler(CircuitBreakerConfig(failure_threshold=1))
        failing = AsyncMock(side_effect=CollaboratorError("down"))
        await handler.call("op", failing, fallback=None)

        func = AsyncMock(return_value="answer")
        assert await handler.call("op", func, fallback="fallback") == "fallback"
        func.assert_not_called()
        assert handler.get_stats() == {"op": "OPEN"}

    @pytest.mark.asyncio
    async def test_circuits_are_per_operation(self):
        """Test one failing operation does not block another."""
        handler = FallbackHandler(CircuitBreakerConfig(failure_threshold=1))
        await handler.call("draft", AsyncMock(side_effect=CollaboratorError("down")), fallback=None)
        assert await handler.call("recommend", AsyncMock(return_value="ok"), fallback="") == "ok"
