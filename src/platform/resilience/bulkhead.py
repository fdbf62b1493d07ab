"""
Bulkhead

Caps the number of in-flight calls of one kind. With the default
max_wait_duration of 0, callers beyond the limit are rejected at once
instead of queueing.
"""

from typing import Any, Awaitable, Callable, TypeVar

import anyio

from src.platform.exception.exceptions import BulkheadFullError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


_T = TypeVar('_T')


class Bulkhead:
    def __init__(
        self, *, name: str, max_concurrent_calls: int, max_wait_duration: float = 0.0
    ) -> None:
        if max_concurrent_calls < 1:
            raise ValueError('max_concurrent_calls must be positive')
        self.name = name
        self.max_concurrent_calls = max_concurrent_calls
        self.max_wait_duration = max_wait_duration
        self._limiter: anyio.CapacityLimiter | None = None

    @property
    def limiter(self) -> anyio.CapacityLimiter:
        # Created lazily so the limiter binds to the running event loop
        if self._limiter is None:
            self._limiter = anyio.CapacityLimiter(self.max_concurrent_calls)
        return self._limiter

    @property
    def available_concurrent_calls(self) -> int:
        return int(self.limiter.available_tokens)

    async def _acquire(self, borrower: object) -> None:
        try:
            self.limiter.acquire_on_behalf_of_nowait(borrower)
            return
        except anyio.WouldBlock:
            if self.max_wait_duration <= 0:
                self._reject()

        with anyio.move_on_after(self.max_wait_duration):
            await self.limiter.acquire_on_behalf_of(borrower)
            return
        self._reject()

    def _reject(self) -> None:
        metrics.bulkhead_rejections.labels(name=self.name).inc()
        Logger.base.warning(
            f'🚧 [BULKHEAD:{self.name}] rejected, {self.max_concurrent_calls} calls in flight'
        )
        raise BulkheadFullError(self.name)

    async def execute(
        self, func: Callable[..., Awaitable[_T]], /, *args: Any, **kwargs: Any
    ) -> _T:
        borrower = object()
        await self._acquire(borrower)
        try:
            return await func(*args, **kwargs)
        finally:
            self.limiter.release_on_behalf_of(borrower)
