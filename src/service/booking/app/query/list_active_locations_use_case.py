from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_location_query_repo import ILocationQueryRepo
from src.service.booking.domain.entity.location_entity import Location


class ListActiveLocationsUseCase:
    def __init__(self, *, location_query_repo: ILocationQueryRepo) -> None:
        self.location_query_repo = location_query_repo

    @Logger.io
    async def list_active_locations(self) -> List[Location]:
        return await self.location_query_repo.list_active()
