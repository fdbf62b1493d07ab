"""
Booking Command Repository Interface

Implementations are bound to the unit of work that created them, so every
call made through one instance runs in the same transaction.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable

from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking, BookingStatus


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        pass

    @abstractmethod
    async def save(self, *, booking: Booking) -> Booking:
        """
        Insert or update a booking.

        Returns:
            The stored booking; a new booking comes back with its id assigned
        """
        pass

    @abstractmethod
    async def find_conflicting_booking_ids(
        self,
        *,
        location_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> set[UUID]:
        """
        Ids of bookings at location_id whose status is in statuses and whose
        [start_time, end_time) overlaps [start, end).
        """
        pass
