from src.platform.resilience.bulkhead import Bulkhead
from src.platform.resilience.circuit_breaker import CircuitBreaker, CircuitState
from src.platform.resilience.resilience_policy import (
    PolicyName,
    ResiliencePolicy,
    ResiliencePolicyRegistry,
)
from src.platform.resilience.retry import RetryPolicy


__all__ = [
    'Bulkhead',
    'CircuitBreaker',
    'CircuitState',
    'PolicyName',
    'ResiliencePolicy',
    'ResiliencePolicyRegistry',
    'RetryPolicy',
]
