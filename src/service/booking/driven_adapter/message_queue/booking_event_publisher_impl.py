"""
Booking Event Publisher Implementation

Kafka adapter for IBookingEventPublisher. Topics come from settings:
- BookingCreatedEvent   → KAFKA_TOPIC_BOOKING_CREATED
- BookingCancelledEvent → KAFKA_TOPIC_BOOKING_EVENTS

The booking id is the message key so all events of one booking land on the
same partition in order.
"""

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.event_publisher import publish_domain_event
from src.service.booking.app.interface.i_booking_event_publisher import IBookingEventPublisher
from src.service.booking.domain.domain_event.booking_domain_event import (
    BookingCancelledEvent,
    BookingCreatedEvent,
)


class BookingEventPublisherImpl(IBookingEventPublisher):
    @Logger.io
    async def publish_booking_created(self, *, event: BookingCreatedEvent) -> None:
        await publish_domain_event(
            topic=settings.KAFKA_TOPIC_BOOKING_CREATED,
            payload=event.to_payload(),
            key=str(event.booking_id),
        )

    @Logger.io
    async def publish_booking_cancelled(self, *, event: BookingCancelledEvent) -> None:
        await publish_domain_event(
            topic=settings.KAFKA_TOPIC_BOOKING_EVENTS,
            payload=event.to_payload(),
            key=str(event.booking_id),
        )
