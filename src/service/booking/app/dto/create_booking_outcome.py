"""Create booking outcome DTO."""

from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking, BookingStatus


@attrs.define(frozen=True)
class CreateBookingOutcome:
    """
    Result of a creation attempt.

    A conflict or a degraded backend is a normal outcome (status FAILED),
    not an exception; only unknown locations raise.
    """

    booking_id: Optional[UUID]
    status: BookingStatus
    available: bool
    conflicts: list[UUID] = attrs.field(factory=list)
    total_amount_cents: int = 0

    @property
    def succeeded(self) -> bool:
        return self.booking_id is not None and self.status == BookingStatus.PENDING_PAYMENT

    @classmethod
    def created(cls, *, booking: Booking) -> 'CreateBookingOutcome':
        return cls(
            booking_id=booking.id,
            status=booking.status,
            available=True,
            conflicts=[],
            total_amount_cents=booking.total_amount_cents,
        )

    @classmethod
    def conflicted(cls, *, conflicts: set[UUID]) -> 'CreateBookingOutcome':
        return cls(
            booking_id=None,
            status=BookingStatus.FAILED,
            available=False,
            conflicts=sorted(conflicts, key=str),
        )

    @classmethod
    def failed(cls) -> 'CreateBookingOutcome':
        return cls(booking_id=None, status=BookingStatus.FAILED, available=False)
