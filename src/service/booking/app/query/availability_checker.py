"""
Availability Checker

Finds live bookings whose window overlaps a requested [start, end) at a
location. Every store query goes through the availability-check policy and
fails closed: if the store cannot answer, callers get ServiceUnavailableError,
never an empty (= free) result.
"""

from datetime import datetime
from typing import Callable

from opentelemetry import trace
from uuid_utils import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    CustomBaseError,
    NotFoundError,
    ServiceUnavailableError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.resilience.resilience_policy import ResiliencePolicy
from src.service.booking.app.dto.availability_check_result import AvailabilityCheckResult
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.entity.booking_entity import LIVE_BOOKING_STATUSES


class AvailabilityChecker:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        policy: ResiliencePolicy,
    ) -> None:
        self.uow_factory = uow_factory
        self.policy = policy
        self.tracer = trace.get_tracer(__name__)

    async def _query_conflicts(
        self, *, location_id: UUID, start: datetime, end: datetime
    ) -> set[UUID]:
        # Read-only: leaving without commit rolls back
        async with self.uow_factory() as uow:
            return await uow.booking_command_repo.find_conflicting_booking_ids(
                location_id=location_id, start=start, end=end, statuses=LIVE_BOOKING_STATUSES
            )

    @Logger.io
    async def find_conflicts(
        self,
        *,
        location_id: UUID,
        start: datetime,
        end: datetime,
        booking_command_repo: IBookingCommandRepo | None = None,
    ) -> set[UUID]:
        """
        Args:
            booking_command_repo: repo bound to an open unit of work; when given
                the query runs once inside that unit instead of a fresh one,
                and store errors propagate unchanged so the owner of the unit
                can retry it as a whole

        Raises:
            ServiceUnavailableError: retries exhausted or breaker open
        """
        with self.tracer.start_as_current_span(
            'availability.find_conflicts',
            attributes={'location.id': str(location_id)},
        ):
            try:
                if booking_command_repo is not None:
                    # An error aborts the caller's transaction, so no retry in place
                    return await self.policy.execute_once(
                        booking_command_repo.find_conflicting_booking_ids,
                        location_id=location_id,
                        start=start,
                        end=end,
                        statuses=LIVE_BOOKING_STATUSES,
                    )
                return await self.policy.execute(
                    self._query_conflicts, location_id=location_id, start=start, end=end
                )
            except NotFoundError:
                raise
            except Exception as e:
                if booking_command_repo is not None and not isinstance(e, CustomBaseError):
                    Logger.base.warning(
                        f'⚠️ [AVAILABILITY] Conflict query failed inside unit of work for '
                        f'location {location_id}: {type(e).__name__}: {e}'
                    )
                    raise
                Logger.base.error(
                    f'🛑 [AVAILABILITY] Fallback for location {location_id} '
                    f'[{start.isoformat()}, {end.isoformat()}): {type(e).__name__}: {e}'
                )
                raise ServiceUnavailableError('Booking system temporarily unavailable') from e

    async def is_available(
        self,
        *,
        location_id: UUID,
        start: datetime,
        end: datetime,
        booking_command_repo: IBookingCommandRepo | None = None,
    ) -> bool:
        conflicts = await self.find_conflicts(
            location_id=location_id,
            start=start,
            end=end,
            booking_command_repo=booking_command_repo,
        )
        return not conflicts

    async def check(
        self, *, location_id: UUID, start: datetime, end: datetime
    ) -> AvailabilityCheckResult:
        conflicts = await self.find_conflicts(location_id=location_id, start=start, end=end)
        return AvailabilityCheckResult.from_conflicts(conflicts)
