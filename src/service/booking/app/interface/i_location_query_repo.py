from abc import ABC, abstractmethod
from typing import List

from uuid_utils import UUID

from src.service.booking.domain.entity.location_entity import Location


class ILocationQueryRepo(ABC):
    """Read-only access to the venue catalog."""

    @abstractmethod
    async def get_by_id(self, *, location_id: UUID) -> Location | None:
        pass

    @abstractmethod
    async def list_active(self) -> List[Location]:
        """Active locations ordered by name ascending."""
        pass
