from uuid_utils import UUID

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_location_query_repo import ILocationQueryRepo
from src.service.booking.domain.entity.location_entity import Location


class GetLocationUseCase:
    def __init__(self, *, location_query_repo: ILocationQueryRepo) -> None:
        self.location_query_repo = location_query_repo

    @Logger.io
    async def get_location(self, *, location_id: UUID) -> Location:
        location = await self.location_query_repo.get_by_id(location_id=location_id)
        if not location:
            raise NotFoundError('Location not found')
        return location
