"""
Booking Domain Events

Published after a booking change is committed. Consumers receive the
JSON payload built by to_payload(); the topic is chosen by the publisher.
"""

from datetime import datetime
from typing import Any

import attrs
from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking, BookingStatus


@attrs.define
class BookingCreatedEvent:
    """Domain event fired when a booking is persisted in PENDING_PAYMENT"""

    booking_id: UUID
    status: BookingStatus
    location_id: UUID
    start_time: datetime
    end_time: datetime
    total_amount_cents: int
    currency: str

    @classmethod
    def from_booking(cls, *, booking: Booking) -> 'BookingCreatedEvent':
        assert booking.id is not None, 'Booking must be saved before announcing it'
        return cls(
            booking_id=booking.id,
            status=booking.status,
            location_id=booking.location_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            total_amount_cents=booking.total_amount_cents,
            currency=booking.currency,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            'bookingId': str(self.booking_id),
            'status': self.status.value,
            'locationId': str(self.location_id),
            'start': self.start_time.isoformat(),
            'end': self.end_time.isoformat(),
            'totalAmountCents': self.total_amount_cents,
            'currency': self.currency,
        }


@attrs.define
class BookingCancelledEvent:
    booking_id: UUID
    status: BookingStatus = BookingStatus.CANCELLED

    @classmethod
    def from_booking(cls, *, booking: Booking) -> 'BookingCancelledEvent':
        assert booking.id is not None
        return cls(booking_id=booking.id, status=booking.status)

    def to_payload(self) -> dict[str, Any]:
        return {
            'bookingId': str(self.booking_id),
            'status': self.status.value,
            'type': 'booking_cancelled',
        }


BookingDomainEvent = BookingCreatedEvent | BookingCancelledEvent
