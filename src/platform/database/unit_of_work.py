"""
Unit of Work

- UoW owns the transaction lifecycle (commit / rollback)
- Repositories reached through the UoW share its transaction
- Leaving the block without commit() rolls back
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Self


if TYPE_CHECKING:
    from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
    from src.service.booking.app.interface.i_location_query_repo import ILocationQueryRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow:
            booking = await uow.booking_command_repo.save(booking=booking)
            await uow.commit()
    """

    booking_command_repo: IBookingCommandRepo
    location_query_repo: ILocationQueryRepo

    def __init__(self) -> None:
        self._committed = False

    async def __aenter__(self) -> Self:
        self._committed = False
        return self

    async def __aexit__(self, *args: Any) -> None:
        if not self._committed:
            await self.rollback()

    async def commit(self) -> None:
        await self._commit()
        self._committed = True

    async def lock_location(self, *, location_id: Any) -> None:
        """Serialize writers of one location until the unit ends. No-op by default."""
        return None

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError
