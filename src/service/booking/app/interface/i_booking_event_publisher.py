"""
Booking Event Publisher Interface

Use cases depend on this port, not on the Kafka adapter.
Publishing is best-effort and happens after the unit of work commits.
"""

from abc import ABC, abstractmethod

from src.service.booking.domain.domain_event.booking_domain_event import (
    BookingCancelledEvent,
    BookingCreatedEvent,
)


class IBookingEventPublisher(ABC):
    @abstractmethod
    async def publish_booking_created(self, *, event: BookingCreatedEvent) -> None:
        pass

    @abstractmethod
    async def publish_booking_cancelled(self, *, event: BookingCancelledEvent) -> None:
        pass
