from datetime import datetime

from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.platform.resilience.resilience_policy import ResiliencePolicy
from src.service.booking.app.dto.availability_check_result import AvailabilityCheckResult
from src.service.booking.app.query.availability_checker import AvailabilityChecker


class CheckLocationAvailabilityUseCase:
    """
    Advisory availability query for callers deciding whether to offer a slot.

    Wrapped in the availability-query policy; when the answer cannot be
    obtained the window is reported as unavailable rather than raising.
    """

    def __init__(
        self,
        *,
        availability_checker: AvailabilityChecker,
        policy: ResiliencePolicy,
    ) -> None:
        self.availability_checker = availability_checker
        self.policy = policy

    @Logger.io
    async def is_available(self, *, location_id: UUID, start: datetime, end: datetime) -> bool:
        try:
            return await self.policy.execute(
                self.availability_checker.is_available,
                location_id=location_id,
                start=start,
                end=end,
            )
        except Exception as e:
            Logger.base.warning(
                f'🛑 [AVAILABILITY-QUERY] Reporting location {location_id} unavailable: '
                f'{type(e).__name__}: {e}'
            )
            return False

    @Logger.io
    async def check_availability(
        self, *, location_id: UUID, start: datetime, end: datetime
    ) -> AvailabilityCheckResult:
        try:
            return await self.policy.execute(
                self.availability_checker.check,
                location_id=location_id,
                start=start,
                end=end,
            )
        except Exception as e:
            Logger.base.warning(
                f'🛑 [AVAILABILITY-QUERY] Reporting location {location_id} unavailable: '
                f'{type(e).__name__}: {e}'
            )
            return AvailabilityCheckResult.unavailable()
