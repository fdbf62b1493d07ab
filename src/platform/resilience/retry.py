"""
Retry policy

Re-runs a coroutine function a bounded number of times with exponential
backoff. Only safe around idempotent calls or a single atomic unit of work;
never around a flow that also publishes events.
"""

from typing import Any, Awaitable, Callable, TypeVar

import anyio
import attrs

from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


_T = TypeVar('_T')


@attrs.define(frozen=True)
class RetryPolicy:
    name: str
    max_attempts: int = attrs.field(default=3, validator=attrs.validators.ge(1))
    wait_duration: float = attrs.field(default=0.1, validator=attrs.validators.ge(0))
    backoff_multiplier: float = attrs.field(default=2.0, validator=attrs.validators.ge(1))
    max_wait_duration: float = 2.0
    # Business and policy errors are final; retrying them only burns the budget
    ignore_exceptions: tuple[type[BaseException], ...] = (CustomBaseError,)

    def wait_before_attempt(self, attempt: int) -> float:
        """Seconds to sleep before `attempt` (2 = first retry)."""
        delay = self.wait_duration * (self.backoff_multiplier ** (attempt - 2))
        return min(delay, self.max_wait_duration)

    def is_retryable(self, exc: BaseException) -> bool:
        return not isinstance(exc, self.ignore_exceptions)

    async def execute(
        self, func: Callable[..., Awaitable[_T]], /, *args: Any, **kwargs: Any
    ) -> _T:
        attempt = 1
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if not self.is_retryable(e) or attempt >= self.max_attempts:
                    raise
                attempt += 1
                delay = self.wait_before_attempt(attempt)
                metrics.retry_attempts.labels(name=self.name).inc()
                Logger.base.warning(
                    f'🔁 [RETRY:{self.name}] {type(e).__name__}: {e} '
                    f'→ attempt {attempt}/{self.max_attempts} in {delay:.3f}s'
                )
                await anyio.sleep(delay)
