from typing import Callable

from src.platform.resilience.bulkhead import Bulkhead
from src.platform.resilience.circuit_breaker import CircuitBreaker
from src.platform.resilience.resilience_policy import ResiliencePolicy
from src.platform.resilience.retry import RetryPolicy


PolicyFactory = Callable[..., ResiliencePolicy]


def build_test_policy(
    name: str,
    *,
    max_attempts: int = 3,
    failure_rate_threshold: float = 50.0,
    sliding_window_size: int = 10,
    minimum_number_of_calls: int = 5,
    wait_duration_in_open_state: float = 30.0,
    max_concurrent_calls: int | None = None,
) -> ResiliencePolicy:
    """Policy with zero backoff so retries do not slow tests down."""
    return ResiliencePolicy(
        name=name,
        retry=RetryPolicy(name=name, max_attempts=max_attempts, wait_duration=0.0),
        circuit_breaker=CircuitBreaker(
            name=name,
            failure_rate_threshold=failure_rate_threshold,
            sliding_window_size=sliding_window_size,
            minimum_number_of_calls=minimum_number_of_calls,
            wait_duration_in_open_state=wait_duration_in_open_state,
        ),
        bulkhead=(
            Bulkhead(name=name, max_concurrent_calls=max_concurrent_calls)
            if max_concurrent_calls
            else None
        ),
    )
