"""
In-memory booking store

Process-local adapters for the booking core, used by unit tests and local
runs without PostgreSQL. Units of work are serialized with one anyio.Lock,
so check-then-insert is atomic exactly like the advisory-locked database
unit. Writes are staged and only become visible on commit.
"""

from datetime import datetime
from typing import Any, Iterable, List, Self

import anyio
import attrs
import uuid_utils
from uuid_utils import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.app.interface.i_location_query_repo import ILocationQueryRepo
from src.service.booking.domain.booking_window_domain import windows_overlap
from src.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from src.service.booking.domain.entity.location_entity import Location


class InMemoryBookingStore:
    def __init__(self, *, locations: Iterable[Location] = ()) -> None:
        self.locations: dict[UUID, Location] = {location.id: location for location in locations}
        self.bookings: dict[UUID, Booking] = {}
        self._lock: anyio.Lock | None = None

    @property
    def lock(self) -> anyio.Lock:
        if self._lock is None:
            self._lock = anyio.Lock()
        return self._lock

    def add_location(self, location: Location) -> Location:
        self.locations[location.id] = location
        return location

    def unit_of_work(self) -> 'InMemoryUnitOfWork':
        return InMemoryUnitOfWork(store=self)


class InMemoryLocationQueryRepo(ILocationQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def get_by_id(self, *, location_id: UUID) -> Location | None:
        return self.store.locations.get(location_id)

    async def list_active(self) -> List[Location]:
        return sorted(
            (location for location in self.store.locations.values() if location.active),
            key=lambda location: location.name,
        )


class InMemoryBookingCommandRepo(IBookingCommandRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store
        self.staged: dict[UUID, Booking] = {}

    def _visible(self) -> dict[UUID, Booking]:
        return self.store.bookings | self.staged

    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        return self._visible().get(booking_id)

    async def save(self, *, booking: Booking) -> Booking:
        if booking.id is None:
            booking = attrs.evolve(booking, id=uuid_utils.uuid7())
        assert booking.id is not None
        self.staged[booking.id] = booking
        return booking

    async def find_conflicting_booking_ids(
        self,
        *,
        location_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> set[UUID]:
        wanted = set(statuses)
        return {
            booking_id
            for booking_id, booking in self._visible().items()
            if booking.location_id == location_id
            and booking.status in wanted
            and windows_overlap(
                a_start=booking.start_time, a_end=booking.end_time, b_start=start, b_end=end
            )
        }


class InMemoryUnitOfWork(AbstractUnitOfWork):
    booking_command_repo: InMemoryBookingCommandRepo

    def __init__(self, *, store: InMemoryBookingStore) -> None:
        super().__init__()
        self.store = store
        self.location_query_repo = InMemoryLocationQueryRepo(store=store)

    async def __aenter__(self) -> Self:
        await self.store.lock.acquire()
        self.booking_command_repo = InMemoryBookingCommandRepo(store=self.store)
        return await super().__aenter__()

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            self.store.lock.release()

    async def _commit(self) -> None:
        self.store.bookings.update(self.booking_command_repo.staged)
        self.booking_command_repo.staged = {}

    async def rollback(self) -> None:
        self.booking_command_repo.staged = {}
