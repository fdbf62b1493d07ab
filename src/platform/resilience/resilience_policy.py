"""
Resilience policy composition

    bulkhead ─▶ circuit breaker ─▶ retry ─▶ call

The bulkhead is outermost so one logical call holds its slot across all of
its retry attempts; the breaker sits outside retry so the breaker records
one outcome per logical call, not per attempt.
"""

from typing import Any, Awaitable, Callable, TypeVar

import attrs

from src.platform.config.core_setting import ResiliencePolicySettings, Settings
from src.platform.resilience.bulkhead import Bulkhead
from src.platform.resilience.circuit_breaker import CircuitBreaker
from src.platform.resilience.retry import RetryPolicy


_T = TypeVar('_T')


class PolicyName:
    AVAILABILITY_CHECK = 'availability-check'
    AVAILABILITY_QUERY = 'availability-query'
    BOOKING_CREATION = 'booking-creation'
    BOOKING_CANCELLATION = 'booking-cancellation'


@attrs.define
class ResiliencePolicy:
    name: str
    retry: RetryPolicy
    circuit_breaker: CircuitBreaker
    bulkhead: Bulkhead | None = None

    @classmethod
    def from_settings(cls, *, name: str, config: ResiliencePolicySettings) -> 'ResiliencePolicy':
        bulkhead = None
        if config.MAX_CONCURRENT_CALLS is not None:
            bulkhead = Bulkhead(
                name=name,
                max_concurrent_calls=config.MAX_CONCURRENT_CALLS,
                max_wait_duration=config.MAX_WAIT_DURATION_BULKHEAD,
            )
        return cls(
            name=name,
            retry=RetryPolicy(
                name=name,
                max_attempts=config.MAX_ATTEMPTS,
                wait_duration=config.WAIT_DURATION,
                backoff_multiplier=config.BACKOFF_MULTIPLIER,
                max_wait_duration=config.MAX_WAIT_DURATION,
            ),
            circuit_breaker=CircuitBreaker(
                name=name,
                failure_rate_threshold=config.FAILURE_RATE_THRESHOLD,
                sliding_window_size=config.SLIDING_WINDOW_SIZE,
                minimum_number_of_calls=config.MINIMUM_NUMBER_OF_CALLS,
                wait_duration_in_open_state=config.WAIT_DURATION_IN_OPEN_STATE,
                permitted_calls_in_half_open_state=config.PERMITTED_CALLS_IN_HALF_OPEN_STATE,
            ),
            bulkhead=bulkhead,
        )

    async def _guarded(self, call: Callable[[], Awaitable[_T]]) -> _T:
        if self.bulkhead is None:
            return await call()
        return await self.bulkhead.execute(call)

    async def execute(
        self, func: Callable[..., Awaitable[_T]], /, *args: Any, **kwargs: Any
    ) -> _T:
        async def call() -> _T:
            return await self.circuit_breaker.execute(self.retry.execute, func, *args, **kwargs)

        return await self._guarded(call)

    async def execute_once(
        self, func: Callable[..., Awaitable[_T]], /, *args: Any, **kwargs: Any
    ) -> _T:
        """
        Bulkhead and breaker without retry.

        For calls bound to a caller's database transaction: after an error the
        transaction is aborted, so only the caller can retry, in a new one.
        """

        async def call() -> _T:
            return await self.circuit_breaker.execute(func, *args, **kwargs)

        return await self._guarded(call)


class ResiliencePolicyRegistry:
    """One policy per logical operation, built once per process from settings."""

    def __init__(self, *, settings: Settings) -> None:
        configs = {
            PolicyName.AVAILABILITY_CHECK: settings.RESILIENCE_AVAILABILITY_CHECK,
            PolicyName.AVAILABILITY_QUERY: settings.RESILIENCE_AVAILABILITY_QUERY,
            PolicyName.BOOKING_CREATION: settings.RESILIENCE_BOOKING_CREATION,
            PolicyName.BOOKING_CANCELLATION: settings.RESILIENCE_BOOKING_CANCELLATION,
        }
        self._policies = {
            name: ResiliencePolicy.from_settings(name=name, config=config)
            for name, config in configs.items()
        }

    def get(self, name: str) -> ResiliencePolicy:
        try:
            return self._policies[name]
        except KeyError:
            raise KeyError(f'Unknown resilience policy: {name}') from None

    def reset_all(self) -> None:
        for policy in self._policies.values():
            policy.circuit_breaker.reset()
