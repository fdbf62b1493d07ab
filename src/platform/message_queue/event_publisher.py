"""
Domain Event Publisher

Best-effort publishing through confluent-kafka's AsyncIO producer.
Payloads are JSON objects serialized with orjson.

- Global async producer instance for connection reuse
- Idempotent producer with acks=all
- Never raises: delivery problems are logged and counted, the caller's
  committed state is never undone by a broker outage
"""

from typing import Any

from confluent_kafka.experimental.aio import AIOProducer
from opentelemetry import trace
import orjson

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


# Global async producer instance
_global_producer: AIOProducer | None = None


async def _get_global_producer() -> AIOProducer:
    """Get global async producer instance - avoid creating new producer on every publish"""
    global _global_producer
    if _global_producer is None:
        _global_producer = AIOProducer(settings.KAFKA_PRODUCER_CONFIG)
    return _global_producer


def serialize_payload(payload: dict[str, Any]) -> bytes:
    # OPT_NON_STR_KEYS keeps uuid keys working; datetimes go out as RFC 3339
    return orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z)


async def publish_domain_event(
    *,
    topic: str,
    payload: dict[str, Any],
    key: str | None = None,
) -> bool:
    """
    Publish one JSON payload to a Kafka topic.

    Returns:
        True when the producer accepted the message, False otherwise
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span(
        'kafka.publish',
        attributes={
            'messaging.system': 'kafka',
            'messaging.destination': topic,
            'messaging.destination_kind': 'topic',
        },
    ):
        try:
            producer = await _get_global_producer()
            await producer.produce(
                topic=topic,
                value=serialize_payload(payload),
                key=key.encode() if key else None,
            )
        except Exception as e:
            metrics.event_publish_failures.labels(topic=topic).inc()
            Logger.base.error(f'❌ [KAFKA] Failed to publish to {topic} (key={key}): {e}')
            return False

        Logger.base.info(f'📤 [KAFKA] Published to {topic} (key={key})')
        return True


async def close_producer() -> None:
    global _global_producer
    if _global_producer is not None:
        await _global_producer.flush()
        await _global_producer.close()
        _global_producer = None
        Logger.base.info('Closed async producer')
