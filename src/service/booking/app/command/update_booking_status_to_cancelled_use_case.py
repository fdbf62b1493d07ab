from typing import Callable

from opentelemetry import trace
from uuid_utils import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError, ServiceUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.resilience.resilience_policy import ResiliencePolicy
from src.service.booking.app.interface.i_booking_event_publisher import IBookingEventPublisher
from src.service.booking.domain.domain_event.booking_domain_event import BookingCancelledEvent
from src.service.booking.domain.entity.booking_entity import Booking


class UpdateBookingToCancelledUseCase:
    """
    Cancel a booking.

    Flow:
    1. Load booking (NotFoundError if missing)
    2. Set CANCELLED and persist; already-cancelled bookings stay CANCELLED
    3. Publish BookingCancelledEvent (best-effort)

    Steps 1-2 run under the booking-cancellation policy.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        event_publisher: IBookingEventPublisher,
        policy: ResiliencePolicy,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_publisher = event_publisher
        self.policy = policy
        self.tracer = trace.get_tracer(__name__)

    async def _cancel_in_unit_of_work(self, *, booking_id: UUID) -> Booking:
        async with self.uow_factory() as uow:
            booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
            if not booking:
                raise NotFoundError('Booking not found')

            cancelled = await uow.booking_command_repo.save(booking=booking.cancel())
            await uow.commit()
        return cancelled

    @Logger.io
    async def cancel_booking(self, *, booking_id: UUID) -> Booking:
        """
        Raises:
            NotFoundError: booking does not exist
            ServiceUnavailableError: store unreachable or breaker open
        """
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': str(booking_id)},
        ):
            try:
                booking = await self.policy.execute(
                    self._cancel_in_unit_of_work, booking_id=booking_id
                )
            except NotFoundError:
                raise
            except Exception as e:
                Logger.base.error(
                    f'🛑 [CANCEL] Fallback for booking {booking_id}: {type(e).__name__}: {e}'
                )
                raise ServiceUnavailableError(
                    'Booking cancellation temporarily unavailable'
                ) from e

            metrics.booking_cancellations.inc()
            Logger.base.info(f'🚫 [CANCEL] Booking {booking_id} → {booking.status}')

            try:
                await self.event_publisher.publish_booking_cancelled(
                    event=BookingCancelledEvent.from_booking(booking=booking)
                )
            except Exception as e:
                Logger.base.warning(
                    f'⚠️ [CANCEL] BookingCancelledEvent for {booking_id} not published: '
                    f'{type(e).__name__}: {e}'
                )

            return booking
