"""
Circuit breaker

Count-based sliding window state machine:

    CLOSED ──(failure rate >= threshold)──▶ OPEN
    OPEN ──(wait_duration_in_open_state elapsed)──▶ HALF_OPEN
    HALF_OPEN ──(probes done, rate < threshold)──▶ CLOSED
    HALF_OPEN ──(probes done, rate >= threshold)──▶ OPEN

One instance per named policy, shared by every concurrent caller in the
process. All state mutations happen between awaits, so no lock is needed on
a single event loop.
"""

from collections import deque
from enum import StrEnum
import time
from typing import Any, Awaitable, Callable, TypeVar

from src.platform.exception.exceptions import CallNotPermittedError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


_T = TypeVar('_T')


class CircuitState(StrEnum):
    CLOSED = 'closed'
    OPEN = 'open'
    HALF_OPEN = 'half_open'


class CircuitBreaker:
    def __init__(
        self,
        *,
        name: str,
        failure_rate_threshold: float = 50.0,
        sliding_window_size: int = 10,
        minimum_number_of_calls: int = 5,
        wait_duration_in_open_state: float = 30.0,
        permitted_calls_in_half_open_state: int = 3,
        ignore_exceptions: tuple[type[BaseException], ...] = (NotFoundError,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 0 < failure_rate_threshold <= 100:
            raise ValueError('failure_rate_threshold must be in (0, 100]')
        if sliding_window_size < 1 or permitted_calls_in_half_open_state < 1:
            raise ValueError('window sizes must be positive')

        self.name = name
        self.failure_rate_threshold = failure_rate_threshold
        self.sliding_window_size = sliding_window_size
        self.minimum_number_of_calls = min(minimum_number_of_calls, sliding_window_size)
        self.wait_duration_in_open_state = wait_duration_in_open_state
        self.permitted_calls_in_half_open_state = permitted_calls_in_half_open_state
        self.ignore_exceptions = ignore_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._outcomes: deque[bool] = deque(maxlen=sliding_window_size)  # True = failure
        self._opened_at = 0.0
        self._half_open_in_flight = 0
        self._half_open_outcomes: list[bool] = []
        self._generation = 0

    @property
    def state(self) -> CircuitState:
        if (
            self._state == CircuitState.OPEN
            and self._clock() - self._opened_at >= self.wait_duration_in_open_state
        ):
            self._transition(CircuitState.HALF_OPEN)
        return self._state

    @property
    def failure_rate(self) -> float:
        """Failure rate in percent over the current window, -1 when not enough calls yet."""
        if len(self._outcomes) < self.minimum_number_of_calls:
            return -1.0
        return 100.0 * sum(self._outcomes) / len(self._outcomes)

    # ========== Manual control ==========

    def transition_to_open_state(self) -> None:
        self._transition(CircuitState.OPEN)

    def transition_to_closed_state(self) -> None:
        self._transition(CircuitState.CLOSED)

    def reset(self) -> None:
        self._transition(CircuitState.CLOSED)

    # ========== Call path ==========

    async def execute(
        self, func: Callable[..., Awaitable[_T]], /, *args: Any, **kwargs: Any
    ) -> _T:
        generation = self._acquire_permission()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if isinstance(e, self.ignore_exceptions):
                self._release_permission(generation)
            else:
                self._on_result(generation, failed=True)
            raise
        self._on_result(generation, failed=False)
        return result

    def _acquire_permission(self) -> int:
        """Admit one call; returns the generation it was admitted in."""
        state = self.state
        if state == CircuitState.OPEN:
            metrics.circuit_breaker_rejections.labels(name=self.name).inc()
            raise CallNotPermittedError(self.name)
        if state == CircuitState.HALF_OPEN:
            in_flight = self._half_open_in_flight + len(self._half_open_outcomes)
            if in_flight >= self.permitted_calls_in_half_open_state:
                metrics.circuit_breaker_rejections.labels(name=self.name).inc()
                raise CallNotPermittedError(self.name)
            self._half_open_in_flight += 1
        return self._generation

    def _release_permission(self, generation: int) -> None:
        if (
            generation == self._generation
            and self._state == CircuitState.HALF_OPEN
            and self._half_open_in_flight
        ):
            self._half_open_in_flight -= 1

    def _on_result(self, generation: int, *, failed: bool) -> None:
        if generation != self._generation:
            # Admitted before the last transition; its outcome belongs to an older window
            return

        if self._state == CircuitState.HALF_OPEN:
            self._release_permission(generation)
            self._half_open_outcomes.append(failed)
            if len(self._half_open_outcomes) >= self.permitted_calls_in_half_open_state:
                rate = 100.0 * sum(self._half_open_outcomes) / len(self._half_open_outcomes)
                self._transition(
                    CircuitState.OPEN
                    if rate >= self.failure_rate_threshold
                    else CircuitState.CLOSED
                )
            return

        self._outcomes.append(failed)
        rate = self.failure_rate
        if rate >= 0 and rate >= self.failure_rate_threshold:
            Logger.base.error(
                f'⚡ [CIRCUIT:{self.name}] failure rate {rate:.1f}% '
                f'>= {self.failure_rate_threshold:.1f}%'
            )
            self._transition(CircuitState.OPEN)

    def _transition(self, to_state: CircuitState) -> None:
        from_state = self._state
        self._state = to_state
        self._outcomes.clear()
        self._half_open_in_flight = 0
        self._half_open_outcomes = []
        self._generation += 1
        if to_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        if from_state != to_state:
            Logger.base.warning(f'⚡ [CIRCUIT:{self.name}] {from_state} → {to_state}')
            metrics.record_circuit_transition(
                name=self.name, from_state=from_state.value, to_state=to_state.value
            )
