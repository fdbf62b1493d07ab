"""Availability check result DTO."""

import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class AvailabilityCheckResult:
    available: bool
    conflicting_booking_ids: frozenset[UUID] = attrs.field(factory=frozenset, converter=frozenset)

    @classmethod
    def from_conflicts(cls, conflicting_booking_ids: set[UUID]) -> 'AvailabilityCheckResult':
        return cls(
            available=not conflicting_booking_ids,
            conflicting_booking_ids=conflicting_booking_ids,
        )

    @classmethod
    def unavailable(cls) -> 'AvailabilityCheckResult':
        """Used when availability cannot be determined; never reports a free window."""
        return cls(available=False)
