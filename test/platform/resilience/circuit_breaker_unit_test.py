"""
Unit tests for CircuitBreaker

The breaker's clock is injected so OPEN → HALF_OPEN timing is deterministic.
"""

from unittest.mock import AsyncMock

import anyio
import pytest

from src.platform.exception.exceptions import CallNotPermittedError, NotFoundError
from src.platform.resilience.circuit_breaker import CircuitBreaker, CircuitState


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _fail() -> None:
    raise ConnectionError('store down')


async def _succeed() -> str:
    return 'ok'


@pytest.mark.unit
class TestCircuitBreaker:
    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def breaker(self, clock: FakeClock) -> CircuitBreaker:
        return CircuitBreaker(
            name='test-breaker',
            failure_rate_threshold=50.0,
            sliding_window_size=4,
            minimum_number_of_calls=4,
            wait_duration_in_open_state=10.0,
            permitted_calls_in_half_open_state=2,
            clock=clock,
        )

    async def _record_failures(self, breaker: CircuitBreaker, count: int) -> None:
        for _ in range(count):
            with pytest.raises(ConnectionError):
                await breaker.execute(_fail)

    @pytest.mark.asyncio
    async def test_stays_closed_below_minimum_number_of_calls(
        self, breaker: CircuitBreaker
    ) -> None:
        await self._record_failures(breaker, 3)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_rate == -1.0

    @pytest.mark.asyncio
    async def test_opens_when_failure_rate_reaches_threshold(
        self, breaker: CircuitBreaker
    ) -> None:
        await breaker.execute(_succeed)
        await breaker.execute(_succeed)
        await self._record_failures(breaker, 2)

        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_open_breaker_rejects_without_calling(self, breaker: CircuitBreaker) -> None:
        breaker.transition_to_open_state()
        func = AsyncMock()

        with pytest.raises(CallNotPermittedError) as exc_info:
            await breaker.execute(func)

        func.assert_not_awaited()
        assert exc_info.value.breaker_name == 'test-breaker'
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_half_opens_after_wait_and_closes_on_successful_probes(
        self, breaker: CircuitBreaker, clock: FakeClock
    ) -> None:
        await self._record_failures(breaker, 4)
        assert breaker.state == CircuitState.OPEN

        clock.advance(5.0)
        assert breaker.state == CircuitState.OPEN

        clock.advance(5.0)
        assert breaker.state == CircuitState.HALF_OPEN

        await breaker.execute(_succeed)
        assert breaker.state == CircuitState.HALF_OPEN
        await breaker.execute(_succeed)
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_failed_probes_reopen(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        await self._record_failures(breaker, 4)
        clock.advance(10.0)

        await breaker.execute(_succeed)
        await self._record_failures(breaker, 1)

        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_ignored_exceptions_are_not_counted(self, breaker: CircuitBreaker) -> None:
        async def _not_found() -> None:
            raise NotFoundError('Booking not found')

        for _ in range(6):
            with pytest.raises(NotFoundError):
                await breaker.execute(_not_found)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_rate == -1.0

    @pytest.mark.asyncio
    async def test_reset_closes_and_clears_window(self, breaker: CircuitBreaker) -> None:
        await self._record_failures(breaker, 4)

        breaker.reset()

        assert breaker.state == CircuitState.CLOSED
        assert await breaker.execute(_succeed) == 'ok'

    @pytest.mark.asyncio
    async def test_call_admitted_before_outage_does_not_count_as_probe(
        self, breaker: CircuitBreaker, clock: FakeClock
    ) -> None:
        """
        Given: a slow call admitted while CLOSED, then the breaker opens and half-opens
        When: the slow call succeeds during HALF_OPEN
        Then: its result is ignored; only the real probes decide the next state
        """
        admitted = anyio.Event()
        release = anyio.Event()

        async def _slow_success() -> str:
            admitted.set()
            await release.wait()
            return 'ok'

        async with anyio.create_task_group() as tg:
            tg.start_soon(breaker.execute, _slow_success)
            await admitted.wait()

            await self._record_failures(breaker, 4)
            clock.advance(10.0)
            assert breaker.state == CircuitState.HALF_OPEN
            await breaker.execute(_succeed)

            release.set()

        assert breaker.state == CircuitState.HALF_OPEN

        await breaker.execute(_succeed)
        assert breaker.state == CircuitState.CLOSED

    def test_rejects_invalid_threshold(self) -> None:
        with pytest.raises(ValueError):
            CircuitBreaker(name='bad', failure_rate_threshold=0)
