from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import orjson
import pytest

from src.platform.message_queue import event_publisher
from src.platform.message_queue.event_publisher import publish_domain_event, serialize_payload


@pytest.mark.unit
class TestPublishDomainEvent:
    @pytest.fixture
    def producer(self):
        producer = AsyncMock()
        with patch.object(
            event_publisher, '_get_global_producer', new=AsyncMock(return_value=producer)
        ):
            yield producer

    @pytest.mark.asyncio
    async def test_publishes_json_payload_with_key(self, producer: AsyncMock) -> None:
        payload = {'bookingId': 'b-1', 'status': 'CANCELLED', 'type': 'booking_cancelled'}

        accepted = await publish_domain_event(topic='booking-events', payload=payload, key='b-1')

        assert accepted is True
        producer.produce.assert_awaited_once()
        kwargs = producer.produce.await_args.kwargs
        assert kwargs['topic'] == 'booking-events'
        assert kwargs['key'] == b'b-1'
        assert orjson.loads(kwargs['value']) == payload

    @pytest.mark.asyncio
    async def test_broker_failure_is_logged_not_raised(self, producer: AsyncMock) -> None:
        producer.produce.side_effect = RuntimeError('broker unreachable')

        accepted = await publish_domain_event(topic='booking-created', payload={'a': 1})

        assert accepted is False

    def test_serializes_datetimes_as_utc(self) -> None:
        value = serialize_payload({'at': datetime(2030, 5, 1, 10, 0, tzinfo=timezone.utc)})

        assert orjson.loads(value) == {'at': '2030-05-01T10:00:00Z'}
