"""
Booking Command Repository Implementation

asyncpg adapter bound to the connection of an open unit of work.
"""

from datetime import datetime
from typing import Iterable

import asyncpg
from opentelemetry import trace
import uuid_utils
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.entity.booking_entity import Booking, BookingStatus


_BOOKING_COLUMNS = """
    id, location_id, event_id, organization_id, start_time, end_time, status,
    total_amount_cents, currency, payment_intent_id, created_at, updated_at
"""


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, *, conn: asyncpg.Connection) -> None:
        self.conn = conn
        self.tracer = trace.get_tracer(__name__)

    @staticmethod
    def _to_entity(row: asyncpg.Record) -> Booking:
        return Booking(
            id=row['id'],
            location_id=row['location_id'],
            event_id=row['event_id'],
            organization_id=row['organization_id'],
            start_time=row['start_time'],
            end_time=row['end_time'],
            status=BookingStatus(row['status']),
            total_amount_cents=row['total_amount_cents'],
            currency=row['currency'],
            payment_intent_id=row['payment_intent_id'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        row = await self.conn.fetchrow(
            f'SELECT {_BOOKING_COLUMNS} FROM bookings WHERE id = $1',
            booking_id,
        )
        return self._to_entity(row) if row else None

    @Logger.io
    async def save(self, *, booking: Booking) -> Booking:
        booking_id = booking.id or uuid_utils.uuid7()
        with self.tracer.start_as_current_span(
            'repo.save_booking',
            attributes={'booking.id': str(booking_id), 'booking.status': booking.status.value},
        ):
            row = await self.conn.fetchrow(
                f"""
                INSERT INTO bookings ({_BOOKING_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
                ON CONFLICT (id) DO UPDATE SET
                    status = EXCLUDED.status,
                    payment_intent_id = EXCLUDED.payment_intent_id,
                    updated_at = EXCLUDED.updated_at
                RETURNING {_BOOKING_COLUMNS}
                """,
                booking_id,
                booking.location_id,
                booking.event_id,
                booking.organization_id,
                booking.start_time,
                booking.end_time,
                booking.status.value,
                booking.total_amount_cents,
                booking.currency,
                booking.payment_intent_id,
                booking.created_at,
                booking.updated_at,
            )
        return self._to_entity(row)

    @Logger.io
    async def find_conflicting_booking_ids(
        self,
        *,
        location_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> set[UUID]:
        with self.tracer.start_as_current_span(
            'repo.find_conflicting_booking_ids',
            attributes={'location.id': str(location_id)},
        ):
            rows = await self.conn.fetch(
                """
                SELECT id FROM bookings
                WHERE location_id = $1
                  AND status = ANY($2::text[])
                  AND start_time < $3
                  AND end_time > $4
                """,
                location_id,
                [status.value for status in statuses],
                end,
                start,
            )
        return {row['id'] for row in rows}
