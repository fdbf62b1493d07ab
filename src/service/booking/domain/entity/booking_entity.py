from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger


class BookingStatus(StrEnum):
    PENDING_PAYMENT = 'PENDING_PAYMENT'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    FAILED = 'FAILED'


# Statuses that hold a location's time window
LIVE_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING_PAYMENT, BookingStatus.CONFIRMED}
)


@attrs.define
class Booking:
    location_id: UUID
    event_id: Optional[UUID]
    organization_id: UUID
    start_time: datetime
    end_time: datetime
    total_amount_cents: int
    currency: str
    status: BookingStatus = BookingStatus.PENDING_PAYMENT
    id: Optional[UUID] = None  # assigned by the store on first save
    payment_intent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_BOOKING_STATUSES

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        location_id: UUID,
        event_id: Optional[UUID],
        organization_id: UUID,
        start_time: datetime,
        end_time: datetime,
        total_amount_cents: int,
        currency: str,
    ) -> 'Booking':
        now = datetime.now(timezone.utc)
        return cls(
            location_id=location_id,
            event_id=event_id,
            organization_id=organization_id,
            start_time=start_time,
            end_time=end_time,
            total_amount_cents=total_amount_cents,
            currency=currency,
            status=BookingStatus.PENDING_PAYMENT,
            created_at=now,
            updated_at=now,
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """Cancelling an already cancelled booking just refreshes updated_at."""
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            updated_at=datetime.now(timezone.utc),
        )
