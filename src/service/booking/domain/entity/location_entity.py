import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class Location:
    """Venue from the catalog; read-only for the booking core."""

    id: UUID
    name: str
    address: str
    capacity: int
    price_per_hour_cents: int
    active: bool = True
