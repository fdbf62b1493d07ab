"""
Unit tests for CreateBookingUseCase

Test Focus:
1. Success: priced, persisted in PENDING_PAYMENT, one BookingCreatedEvent
2. Conflicts: FAILED outcome listing the blocking booking, nothing written
3. Concurrency: overlapping creations never both succeed
4. Degradation: open breakers, a full bulkhead or outages give FAILED,
   unknown location raises
5. Event decoupling: a publish failure never undoes the booking
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import anyio
import pytest
import uuid_utils

from src.platform.exception.exceptions import NotFoundError
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.dto.create_booking_outcome import CreateBookingOutcome
from src.service.booking.app.query.availability_checker import AvailabilityChecker
from src.service.booking.domain.entity.booking_entity import BookingStatus
from src.service.booking.domain.entity.location_entity import Location
from src.service.booking.driven_adapter.repo.in_memory_store import InMemoryBookingStore
from test.resilience_test_helper import build_test_policy
from test.service.booking.failing_unit_of_work import FailingUnitOfWork
from test.stub_event_publisher import RecordingEventPublisher


ORGANIZATION_ID = uuid_utils.uuid7()
EVENT_ID = uuid_utils.uuid7()


async def _create(
    use_case: CreateBookingUseCase,
    *,
    location_id,
    start: datetime,
    end: datetime,
) -> CreateBookingOutcome:
    return await use_case.create_booking(
        location_id=location_id,
        event_id=EVENT_ID,
        organization_id=ORGANIZATION_ID,
        start=start,
        end=end,
        currency='EUR',
    )


@pytest.mark.unit
class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_successfully_create_one_hour_booking(
        self,
        create_booking_use_case: CreateBookingUseCase,
        store: InMemoryBookingStore,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        """
        Given: location at 5000 cents/hour, no bookings
        When: booking [10:00, 11:00)
        Then: PENDING_PAYMENT, total 5000, persisted, one created event
        """
        outcome = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start,
            end=window_start + hour,
        )

        assert outcome.succeeded
        assert outcome.status == BookingStatus.PENDING_PAYMENT
        assert outcome.available is True
        assert outcome.conflicts == []
        assert outcome.total_amount_cents == 5000
        assert outcome.booking_id is not None

        stored = store.bookings[outcome.booking_id]
        assert stored.status == BookingStatus.PENDING_PAYMENT
        assert stored.location_id == main_hall.id
        assert stored.organization_id == ORGANIZATION_ID
        assert stored.event_id == EVENT_ID
        assert stored.currency == 'EUR'
        assert stored.payment_intent_id is None

        assert len(event_publisher.created_events) == 1
        event = event_publisher.created_events[0]
        assert event.booking_id == outcome.booking_id
        assert event.total_amount_cents == 5000
        assert event.status == BookingStatus.PENDING_PAYMENT

    @pytest.mark.asyncio
    async def test_fractional_hours_are_billed_up(
        self,
        create_booking_use_case: CreateBookingUseCase,
        main_hall: Location,
        window_start: datetime,
    ) -> None:
        outcome = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start,
            end=window_start + timedelta(minutes=90),
        )

        assert outcome.total_amount_cents == 10000

    @pytest.mark.asyncio
    async def test_overlapping_creation_returns_conflict(
        self,
        create_booking_use_case: CreateBookingUseCase,
        store: InMemoryBookingStore,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        first = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start,
            end=window_start + hour,
        )

        second = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start + timedelta(minutes=30),
            end=window_start + 2 * hour,
        )

        assert second.status == BookingStatus.FAILED
        assert second.available is False
        assert second.booking_id is None
        assert second.total_amount_cents == 0
        assert second.conflicts == [first.booking_id]
        assert len(store.bookings) == 1
        assert len(event_publisher.created_events) == 1

    @pytest.mark.asyncio
    async def test_window_is_free_again_after_cancellation(
        self,
        create_booking_use_case: CreateBookingUseCase,
        cancel_booking_use_case,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        first = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start,
            end=window_start + hour,
        )
        assert first.booking_id is not None
        await cancel_booking_use_case.cancel_booking(booking_id=first.booking_id)

        second = await _create(
            create_booking_use_case,
            location_id=main_hall.id,
            start=window_start,
            end=window_start + hour,
        )

        assert second.succeeded

    @pytest.mark.asyncio
    async def test_concurrent_overlapping_creations_never_both_succeed(
        self,
        create_booking_use_case: CreateBookingUseCase,
        store: InMemoryBookingStore,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        outcomes: list[CreateBookingOutcome] = []

        async def _attempt(offset_minutes: int) -> None:
            start = window_start + timedelta(minutes=offset_minutes)
            outcomes.append(
                await _create(
                    create_booking_use_case,
                    location_id=main_hall.id,
                    start=start,
                    end=start + hour,
                )
            )

        async with anyio.create_task_group() as tg:
            for offset in (0, 10, 20, 30, 40):
                tg.start_soon(_attempt, offset)

        winners = [outcome for outcome in outcomes if outcome.succeeded]
        losers = [outcome for outcome in outcomes if not outcome.succeeded]
        assert len(winners) == 1
        assert len(losers) == 4
        assert all(loser.conflicts == [winners[0].booking_id] for loser in losers)
        assert len(store.bookings) == 1

    @pytest.mark.asyncio
    async def test_unknown_location_raises_not_found(
        self,
        create_booking_use_case: CreateBookingUseCase,
        store: InMemoryBookingStore,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        with pytest.raises(NotFoundError, match='Location not found'):
            await _create(
                create_booking_use_case,
                location_id=uuid_utils.uuid7(),
                start=window_start,
                end=window_start + hour,
            )

        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_publish_failure_keeps_booking(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        publisher = RecordingEventPublisher(fail=True)
        use_case = CreateBookingUseCase(
            uow_factory=store.unit_of_work,
            availability_checker=availability_checker,
            event_publisher=publisher,
            policy=build_test_policy('booking-creation'),
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome.succeeded
        assert outcome.booking_id is not None
        assert store.bookings[outcome.booking_id].status == BookingStatus.PENDING_PAYMENT
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_publish_is_not_retried(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        publisher = AsyncMock()
        publisher.publish_booking_created.side_effect = ConnectionError('broker down')
        use_case = CreateBookingUseCase(
            uow_factory=store.unit_of_work,
            availability_checker=availability_checker,
            event_publisher=publisher,
            policy=build_test_policy('booking-creation'),
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome.succeeded
        publisher.publish_booking_created.assert_awaited_once()
        assert len(store.bookings) == 1

    @pytest.mark.asyncio
    async def test_availability_breaker_open_gives_failed_outcome(
        self,
        store: InMemoryBookingStore,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        availability_policy = build_test_policy('availability-check')
        availability_policy.circuit_breaker.transition_to_open_state()
        use_case = CreateBookingUseCase(
            uow_factory=store.unit_of_work,
            availability_checker=AvailabilityChecker(
                uow_factory=store.unit_of_work, policy=availability_policy
            ),
            event_publisher=event_publisher,
            policy=build_test_policy('booking-creation'),
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome == CreateBookingOutcome.failed()
        assert store.bookings == {}
        assert event_publisher.events == []

    @pytest.mark.asyncio
    async def test_creation_breaker_open_gives_failed_outcome(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        policy = build_test_policy('booking-creation')
        policy.circuit_breaker.transition_to_open_state()
        use_case = CreateBookingUseCase(
            uow_factory=store.unit_of_work,
            availability_checker=availability_checker,
            event_publisher=event_publisher,
            policy=policy,
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome.status == BookingStatus.FAILED
        assert outcome.conflicts == []
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_store_outage_is_retried_then_falls_back(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        failing = FailingUnitOfWork(store=store, failures=10)
        use_case = CreateBookingUseCase(
            uow_factory=failing.factory,
            availability_checker=availability_checker,
            event_publisher=event_publisher,
            policy=build_test_policy('booking-creation', max_attempts=3),
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome.status == BookingStatus.FAILED
        assert failing.attempts == 3
        assert event_publisher.events == []

    @pytest.mark.asyncio
    async def test_transient_store_failure_recovers(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        failing = FailingUnitOfWork(store=store, failures=1)
        use_case = CreateBookingUseCase(
            uow_factory=failing.factory,
            availability_checker=availability_checker,
            event_publisher=event_publisher,
            policy=build_test_policy('booking-creation'),
        )

        outcome = await _create(
            use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
        )

        assert outcome.succeeded
        assert len(store.bookings) == 1
        assert len(event_publisher.created_events) == 1

    @pytest.mark.asyncio
    async def test_full_bulkhead_gives_failed_outcome(
        self,
        store: InMemoryBookingStore,
        availability_checker: AvailabilityChecker,
        event_publisher: RecordingEventPublisher,
        main_hall: Location,
        window_start: datetime,
        hour: timedelta,
    ) -> None:
        """
        Given: the only creation slot is held by an in-flight call
        When: another creation arrives
        Then: rejected at once with a FAILED outcome, nothing written or published
        """
        policy = build_test_policy('booking-creation', max_concurrent_calls=1)
        use_case = CreateBookingUseCase(
            uow_factory=store.unit_of_work,
            availability_checker=availability_checker,
            event_publisher=event_publisher,
            policy=policy,
        )
        entered = anyio.Event()
        release = anyio.Event()

        async def _hold_slot() -> None:
            entered.set()
            await release.wait()

        async with anyio.create_task_group() as tg:
            tg.start_soon(policy.execute, _hold_slot)
            await entered.wait()

            outcome = await _create(
                use_case, location_id=main_hall.id, start=window_start, end=window_start + hour
            )
            release.set()

        assert outcome == CreateBookingOutcome.failed()
        assert outcome.booking_id is None
        assert outcome.available is False
        assert outcome.conflicts == []
        assert outcome.total_amount_cents == 0
        assert store.bookings == {}
        assert event_publisher.events == []
        assert policy.circuit_breaker.failure_rate == -1.0
