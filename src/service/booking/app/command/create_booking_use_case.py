from datetime import datetime
from typing import Callable, Optional

from opentelemetry import trace
from uuid_utils import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.resilience.resilience_policy import ResiliencePolicy
from src.service.booking.app.dto.create_booking_outcome import CreateBookingOutcome
from src.service.booking.app.interface.i_booking_event_publisher import IBookingEventPublisher
from src.service.booking.app.query.availability_checker import AvailabilityChecker
from src.service.booking.domain.booking_window_domain import calculate_total_amount_cents
from src.service.booking.domain.domain_event.booking_domain_event import BookingCreatedEvent
from src.service.booking.domain.entity.booking_entity import Booking


class CreateBookingUseCase:
    """
    Create booking use case

    Flow (steps 1-4 in one unit of work, serialized per location):
    1. Find live bookings overlapping [start, end) → FAILED outcome if any
    2. Resolve the location (NotFoundError propagates)
    3. Price = hourly rate × billed hours
    4. Persist in PENDING_PAYMENT and commit
    5. Publish BookingCreatedEvent (best-effort, outside the unit)

    The unit of work runs under the booking-creation policy
    (bulkhead → circuit breaker → retry). Publishing is never retried.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        availability_checker: AvailabilityChecker,
        event_publisher: IBookingEventPublisher,
        policy: ResiliencePolicy,
    ) -> None:
        self.uow_factory = uow_factory
        self.availability_checker = availability_checker
        self.event_publisher = event_publisher
        self.policy = policy
        self.tracer = trace.get_tracer(__name__)

    async def _create_in_unit_of_work(
        self,
        *,
        location_id: UUID,
        event_id: Optional[UUID],
        organization_id: UUID,
        start: datetime,
        end: datetime,
        currency: str,
    ) -> tuple[CreateBookingOutcome, Booking | None]:
        async with self.uow_factory() as uow:
            await uow.lock_location(location_id=location_id)

            conflicts = await self.availability_checker.find_conflicts(
                location_id=location_id,
                start=start,
                end=end,
                booking_command_repo=uow.booking_command_repo,
            )
            if conflicts:
                Logger.base.info(
                    f'⛔ [CREATE-BOOKING] Location {location_id} has {len(conflicts)} '
                    f'conflicting booking(s)'
                )
                return CreateBookingOutcome.conflicted(conflicts=conflicts), None

            location = await uow.location_query_repo.get_by_id(location_id=location_id)
            if not location:
                raise NotFoundError('Location not found')

            booking = Booking.create(
                location_id=location_id,
                event_id=event_id,
                organization_id=organization_id,
                start_time=start,
                end_time=end,
                total_amount_cents=calculate_total_amount_cents(
                    price_per_hour_cents=location.price_per_hour_cents, start=start, end=end
                ),
                currency=currency,
            )
            booking = await uow.booking_command_repo.save(booking=booking)
            await uow.commit()

        return CreateBookingOutcome.created(booking=booking), booking

    async def _publish_created(self, *, booking: Booking) -> None:
        try:
            await self.event_publisher.publish_booking_created(
                event=BookingCreatedEvent.from_booking(booking=booking)
            )
        except Exception as e:
            # Booking is already committed; a lost event must not undo it
            Logger.base.warning(
                f'⚠️ [CREATE-BOOKING] BookingCreatedEvent for {booking.id} not published: '
                f'{type(e).__name__}: {e}'
            )

    @Logger.io
    async def create_booking(
        self,
        *,
        location_id: UUID,
        event_id: Optional[UUID],
        organization_id: UUID,
        start: datetime,
        end: datetime,
        currency: str,
    ) -> CreateBookingOutcome:
        """
        Returns:
            PENDING_PAYMENT outcome with booking id and price, or a FAILED
            outcome (with the conflicting ids when the window is taken)

        Raises:
            NotFoundError: location does not exist
        """
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={'location.id': str(location_id)},
        ):
            try:
                outcome, booking = await self.policy.execute(
                    self._create_in_unit_of_work,
                    location_id=location_id,
                    event_id=event_id,
                    organization_id=organization_id,
                    start=start,
                    end=end,
                    currency=currency,
                )
            except NotFoundError:
                raise
            except Exception as e:
                Logger.base.error(
                    f'🛑 [CREATE-BOOKING] Fallback for location {location_id}: '
                    f'{type(e).__name__}: {e}'
                )
                metrics.record_booking_outcome(result='failed')
                return CreateBookingOutcome.failed()

            if booking is None:
                metrics.record_booking_outcome(result='conflict')
                return outcome

            Logger.base.info(
                f'📝 [CREATE-BOOKING] Booking {booking.id} at location {location_id} '
                f'→ {booking.status} ({booking.total_amount_cents} {booking.currency})'
            )
            metrics.record_booking_outcome(result='pending_payment')
            await self._publish_created(booking=booking)
            return outcome
