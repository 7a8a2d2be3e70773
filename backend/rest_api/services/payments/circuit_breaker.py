"""
Circuit breaker guarding calls to the payment gateway.

After `failure_threshold` consecutive gateway failures the circuit opens and
verification fails fast (502 with Retry-After) instead of piling requests on a
stalled Paystack. Once `timeout_seconds` have passed, a limited number of
trial calls are let through; `success_threshold` successes close the circuit
again, a single failure reopens it.

Only what `is_failure` accepts counts against the gateway. A well-formed
"transaction not found" or a 4xx is the gateway working as intended.

    async with paystack_breaker.call():
        response = await http.get(...)
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from enum import Enum
from typing import AsyncIterator, Callable

from shared.config.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


def _every_error(error: BaseException) -> bool:
    return True


@dataclass
class CircuitBreakerConfig:
    name: str
    failure_threshold: int = 5
    success_threshold: int = 2
    timeout_seconds: float = 30.0
    # Trial calls allowed at once while half-open
    half_open_max_calls: int = 1
    is_failure: Callable[[BaseException], bool] = _every_error


@dataclass
class CircuitBreakerStats:
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    state_changes: int = 0


class CircuitBreakerError(Exception):
    """The circuit is open; the call was not attempted."""

    def __init__(self, breaker_name: str, retry_after: float):
        self.breaker_name = breaker_name
        self.retry_after = retry_after
        super().__init__(f"{breaker_name} circuit open, retry in {retry_after:.1f}s")


class CircuitBreaker:
    def __init__(self, config: CircuitBreakerConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self._clock = clock
        self._lock = asyncio.Lock()
        self._stats = CircuitBreakerStats()
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._trial_successes = 0
        self._trials_in_flight = 0
        self._opened_at = 0.0

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def stats(self) -> CircuitBreakerStats:
        return self._stats

    def _cooldown_left(self) -> float:
        if self._state != CircuitState.OPEN:
            return 0.0
        return max(0.0, self._opened_at + self.config.timeout_seconds - self._clock())

    def _move(self, state: CircuitState) -> None:
        logger.info(
            "Circuit breaker state change",
            breaker=self.name,
            old_state=self._state.value,
            new_state=state.value,
            consecutive_failures=self._consecutive_failures,
        )
        self._state = state
        self._stats.state_changes += 1
        self._trial_successes = 0
        self._trials_in_flight = 0
        if state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif state == CircuitState.CLOSED:
            self._consecutive_failures = 0

    async def _admit(self) -> None:
        async with self._lock:
            if self._state == CircuitState.OPEN:
                wait = self._cooldown_left()
                if wait > 0:
                    self._stats.rejected_calls += 1
                    raise CircuitBreakerError(self.name, wait)
                self._move(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._trials_in_flight >= self.config.half_open_max_calls:
                    self._stats.rejected_calls += 1
                    raise CircuitBreakerError(self.name, 1.0)
                self._trials_in_flight += 1

    async def _settle(self, error: BaseException | None) -> None:
        failed = error is not None and self.config.is_failure(error)
        async with self._lock:
            self._stats.total_calls += 1
            trial = self._state == CircuitState.HALF_OPEN
            if trial:
                self._trials_in_flight = max(0, self._trials_in_flight - 1)

            if not failed:
                self._stats.successful_calls += 1
                self._consecutive_failures = 0
                if trial:
                    self._trial_successes += 1
                    if self._trial_successes >= self.config.success_threshold:
                        self._move(CircuitState.CLOSED)
                return

            self._stats.failed_calls += 1
            self._consecutive_failures += 1
            logger.warning(
                "Gateway call failed",
                breaker=self.name,
                error=str(error),
                consecutive_failures=self._consecutive_failures,
                threshold=self.config.failure_threshold,
            )
            if trial or self._consecutive_failures >= self.config.failure_threshold:
                self._move(CircuitState.OPEN)

    @asynccontextmanager
    async def call(self) -> AsyncIterator[None]:
        """
        Run the enclosed block under the breaker.

        Raises:
            CircuitBreakerError: the circuit is open (or its trial slots are taken)
        """
        await self._admit()
        try:
            yield
        except Exception as e:
            await self._settle(e)
            raise
        await self._settle(None)

    async def reset(self) -> None:
        async with self._lock:
            self._move(CircuitState.CLOSED)

    def snapshot(self) -> dict[str, object]:
        """State and counters for /api/health/detailed and the CLI."""
        return {
            "state": self._state.value,
            **asdict(self._stats),
            "retry_after_seconds": round(self._cooldown_left(), 1),
        }


def is_gateway_failure(error: BaseException) -> bool:
    """Transport errors, timeouts and 5xx answers count against the gateway."""
    from rest_api.services.payments.paystack import GatewayError

    return isinstance(error, GatewayError) and error.retryable


paystack_breaker = CircuitBreaker(
    CircuitBreakerConfig(
        name="paystack",
        failure_threshold=5,
        success_threshold=2,
        timeout_seconds=30.0,
        half_open_max_calls=1,
        is_failure=is_gateway_failure,
    )
)

_BREAKERS = (paystack_breaker,)


def get_all_breaker_stats() -> dict[str, dict]:
    return {breaker.name: breaker.snapshot() for breaker in _BREAKERS}
