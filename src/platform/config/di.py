"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.asyncpg_setting import close_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.event_publisher import close_producer
from src.platform.resilience.resilience_policy import PolicyName, ResiliencePolicyRegistry
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.command.update_booking_status_to_cancelled_use_case import (
    UpdateBookingToCancelledUseCase,
)
from src.service.booking.app.query.availability_checker import AvailabilityChecker
from src.service.booking.app.query.check_location_availability_use_case import (
    CheckLocationAvailabilityUseCase,
)
from src.service.booking.app.query.get_booking_use_case import GetBookingUseCase
from src.service.booking.app.query.get_location_use_case import GetLocationUseCase
from src.service.booking.app.query.list_active_locations_use_case import (
    ListActiveLocationsUseCase,
)
from src.service.booking.driven_adapter.message_queue.booking_event_publisher_impl import (
    BookingEventPublisherImpl,
)
from src.service.booking.driven_adapter.repo.location_query_repo_impl import (
    LocationQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.unit_of_work_impl import AsyncpgUnitOfWork


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Resilience policies (breaker state is process-wide, so Singleton)
    resilience_registry = providers.Singleton(ResiliencePolicyRegistry, settings=config_service)
    availability_check_policy = resilience_registry.provided.get.call(PolicyName.AVAILABILITY_CHECK)
    availability_query_policy = resilience_registry.provided.get.call(PolicyName.AVAILABILITY_QUERY)
    booking_creation_policy = resilience_registry.provided.get.call(PolicyName.BOOKING_CREATION)
    booking_cancellation_policy = resilience_registry.provided.get.call(
        PolicyName.BOOKING_CANCELLATION
    )

    # Unit of work: a fresh one per call, use cases receive the factory itself
    unit_of_work = providers.Factory(AsyncpgUnitOfWork)

    # Repositories used outside a unit of work
    location_query_repo = providers.Singleton(LocationQueryRepoImpl)

    # Message Queue Publishers
    booking_event_publisher = providers.Singleton(BookingEventPublisherImpl)

    availability_checker = providers.Singleton(
        AvailabilityChecker,
        uow_factory=unit_of_work.provider,
        policy=availability_check_policy,
    )

    # Use cases (stateless, can be Singleton)
    create_booking_use_case = providers.Singleton(
        CreateBookingUseCase,
        uow_factory=unit_of_work.provider,
        availability_checker=availability_checker,
        event_publisher=booking_event_publisher,
        policy=booking_creation_policy,
    )
    cancel_booking_use_case = providers.Singleton(
        UpdateBookingToCancelledUseCase,
        uow_factory=unit_of_work.provider,
        event_publisher=booking_event_publisher,
        policy=booking_cancellation_policy,
    )
    check_location_availability_use_case = providers.Singleton(
        CheckLocationAvailabilityUseCase,
        availability_checker=availability_checker,
        policy=availability_query_policy,
    )
    get_booking_use_case = providers.Singleton(
        GetBookingUseCase,
        uow_factory=unit_of_work.provider,
    )
    get_location_use_case = providers.Singleton(
        GetLocationUseCase,
        location_query_repo=location_query_repo,
    )
    list_active_locations_use_case = providers.Singleton(
        ListActiveLocationsUseCase,
        location_query_repo=location_query_repo,
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.resilience_registry()


def cleanup() -> None:
    container.reset_singletons()


async def shutdown() -> None:
    """Release the Kafka producer and this loop's asyncpg pool, then drop singletons."""
    try:
        await close_producer()
        Logger.base.info('📤 [Shutdown] Kafka producer closed')
    except Exception as e:
        Logger.base.error(f'❌ [Shutdown] Failed to close Kafka producer: {e}')

    await close_asyncpg_pool()
    cleanup()
