"""
Test Configuration and Fixtures

- Environment is prepared before any application import (settings are read
  at import time)
- Unit tests run against the in-memory store; no PostgreSQL or Kafka needed
- Resilience policies are built with zero backoff so retries do not slow tests
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)
    os.environ.setdefault('POSTGRES_DB', 'venue_booking_test_db')
    os.environ.setdefault('DEBUG', 'false')


_early_setup_test_environment()

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
import uuid_utils  # noqa: E402

from src.service.booking.app.command.create_booking_use_case import (  # noqa: E402
    CreateBookingUseCase,
)
from src.service.booking.app.command.update_booking_status_to_cancelled_use_case import (  # noqa: E402
    UpdateBookingToCancelledUseCase,
)
from src.service.booking.app.query.availability_checker import AvailabilityChecker  # noqa: E402
from src.service.booking.app.query.check_location_availability_use_case import (  # noqa: E402
    CheckLocationAvailabilityUseCase,
)
from src.service.booking.domain.entity.location_entity import Location  # noqa: E402
from src.service.booking.driven_adapter.repo.in_memory_store import (  # noqa: E402
    InMemoryBookingStore,
)
from test.resilience_test_helper import PolicyFactory, build_test_policy  # noqa: E402
from test.stub_event_publisher import RecordingEventPublisher  # noqa: E402


@pytest.fixture
def policy_factory() -> PolicyFactory:
    return build_test_policy


@pytest.fixture
def window_start() -> datetime:
    return datetime(2030, 5, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def hour() -> timedelta:
    return timedelta(hours=1)


@pytest.fixture
def main_hall() -> Location:
    return Location(
        id=uuid_utils.uuid7(),
        name='Main Hall',
        address='1 Conference Way',
        capacity=200,
        price_per_hour_cents=5000,
    )


@pytest.fixture
def store(main_hall: Location) -> InMemoryBookingStore:
    return InMemoryBookingStore(locations=[main_hall])


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def availability_checker(store: InMemoryBookingStore) -> AvailabilityChecker:
    return AvailabilityChecker(
        uow_factory=store.unit_of_work,
        policy=build_test_policy('availability-check'),
    )


@pytest.fixture
def create_booking_use_case(
    store: InMemoryBookingStore,
    availability_checker: AvailabilityChecker,
    event_publisher: RecordingEventPublisher,
) -> CreateBookingUseCase:
    return CreateBookingUseCase(
        uow_factory=store.unit_of_work,
        availability_checker=availability_checker,
        event_publisher=event_publisher,
        policy=build_test_policy('booking-creation', max_concurrent_calls=25),
    )


@pytest.fixture
def cancel_booking_use_case(
    store: InMemoryBookingStore, event_publisher: RecordingEventPublisher
) -> UpdateBookingToCancelledUseCase:
    return UpdateBookingToCancelledUseCase(
        uow_factory=store.unit_of_work,
        event_publisher=event_publisher,
        policy=build_test_policy('booking-cancellation'),
    )


@pytest.fixture
def check_location_availability_use_case(
    availability_checker: AvailabilityChecker,
) -> CheckLocationAvailabilityUseCase:
    return CheckLocationAvailabilityUseCase(
        availability_checker=availability_checker,
        policy=build_test_policy('availability-query'),
    )
