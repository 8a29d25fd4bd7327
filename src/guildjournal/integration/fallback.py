"""
guildjournal.integration.fallback - Circuit breaker and fallback values

The content service is optional: when it fails, the engine still needs an
answer. FallbackHandler runs a collaborator coroutine behind a per-operation
circuit breaker and substitutes a fixed fallback value on any
CollaboratorError or while the circuit is open.

Usage:
    from guildjournal.integration.fallback import FallbackHandler

    handler = FallbackHandler()
    text = await handler.call("recommend", lambda: client.generate(prompt), fallback="...")
"""

from typing import Awaitable, Callable, Dict, Optional, TypeVar
from dataclasses import dataclass
from enum import Enum, auto
import time
import logging
import threading

from ..exceptions import CollaboratorError

logger = logging.getLogger("guildjournal.integration.fallback")

T = TypeVar('T')


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = auto()      # Normal operation, requests flow through
    OPEN = auto()        # Failing, requests are blocked
    HALF_OPEN = auto()   # Testing if service recovered


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 3      # Failures before opening circuit
    success_threshold: int = 1      # Successes to close circuit from half-open
    timeout_seconds: float = 60.0   # Time before trying half-open
    half_open_max_calls: int = 1    # Max calls in half-open


class CircuitBreaker:
    """
    Circuit breaker for content service calls.

    States:
    - CLOSED: Normal operation. Failures increment counter.
    - OPEN: After failure_threshold failures. All calls blocked for timeout_seconds.
    - HALF_OPEN: After timeout. Limited calls allowed to test recovery.

    If test calls succeed, circuit closes. If they fail, circuit opens again.
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: Optional[float] = None
        self._half_open_calls = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current state, potentially transitioning from OPEN to HALF_OPEN."""
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._last_failure_time is not None and (
                    self._clock() - self._last_failure_time > self.config.timeout_seconds
                ):
                    self._state = CircuitState.HALF_OPEN
                    self._half_open_calls = 0
                    logger.info(f"Circuit {self.name}: OPEN -> HALF_OPEN")
            return self._state

    def is_available(self) -> bool:
        """Check if requests can go through."""
        state = self.state
        if state == CircuitState.CLOSED:
            return True
        if state == CircuitState.HALF_OPEN:
            with self._lock:
                if self._half_open_calls < self.config.half_open_max_calls:
                    self._half_open_calls += 1
                    return True
            return False
        return False  # OPEN

    def record_success(self):
        """Record a successful call."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.config.success_threshold:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
                    logger.info(f"Circuit {self.name}: HALF_OPEN -> CLOSED (recovered)")
            elif self._state == CircuitState.CLOSED:
                self._failure_count = max(0, self._failure_count - 1)

    def record_failure(self):
        """Record a failed call."""
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                self._success_count = 0
                logger.warning(f"Circuit {self.name}: HALF_OPEN -> OPEN (test failed)")
            elif self._state == CircuitState.CLOSED:
                if self._failure_count >= self.config.failure_threshold:
                    self._state = CircuitState.OPEN
                    logger.warning(
                        f"Circuit {self.name}: CLOSED -> OPEN "
                        f"(failures: {self._failure_count})"
                    )


class FallbackHandler:
    """
    Runs collaborator calls and substitutes fallbacks on failure.

    One circuit breaker per operation name, created on first use.
    """

    def __init__(self, circuit_config: Optional[CircuitBreakerConfig] = None):
        self._circuit_config = circuit_config or CircuitBreakerConfig()
        self._circuits: Dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def get_circuit(self, operation: str) -> CircuitBreaker:
        """Get or create circuit breaker for operation."""
        with self._lock:
            if operation not in self._circuits:
                self._circuits[operation] = CircuitBreaker(
                    f"content_{operation}",
                    self._circuit_config,
                )
            return self._circuits[operation]

    async def call(
        self,
        operation: str,
        func: Callable[[], Awaitable[T]],
        fallback: T,
    ) -> T:
        """
        Await func() unless the circuit is open; return fallback on failure.

        Only CollaboratorError is absorbed. Anything else is a programming
        error and propagates.
        """
        circuit = self.get_circuit(operation)
        if not circuit.is_available():
            logger.info(f"Circuit {circuit.name} open, using fallback for {operation}")
            return fallback

        try:
            result = await func()
        except CollaboratorError as e:
            circuit.record_failure()
            logger.warning(f"Content service {operation} failed: {e}")
            return fallback

        circuit.record_success()
        return result

    def get_stats(self) -> Dict[str, str]:
        with self._lock:
            return {name: circuit.state.name for name, circuit in self._circuits.items()}
