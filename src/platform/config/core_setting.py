import os
from pathlib import Path

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class ResiliencePolicySettings(BaseModel):
    """Tuning for one named resilience policy (retry + circuit breaker + optional bulkhead)."""

    # Retry
    MAX_ATTEMPTS: int = 3
    WAIT_DURATION: float = 0.1  # seconds before the 2nd attempt
    BACKOFF_MULTIPLIER: float = 2.0
    MAX_WAIT_DURATION: float = 2.0

    # Circuit breaker (count-based sliding window)
    FAILURE_RATE_THRESHOLD: float = 50.0  # percent
    SLIDING_WINDOW_SIZE: int = 10
    MINIMUM_NUMBER_OF_CALLS: int = 5
    WAIT_DURATION_IN_OPEN_STATE: float = 30.0  # seconds
    PERMITTED_CALLS_IN_HALF_OPEN_STATE: int = 3

    # Bulkhead, None disables it
    MAX_CONCURRENT_CALLS: int | None = None
    MAX_WAIT_DURATION_BULKHEAD: float = 0.0  # 0 = reject immediately


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        env_nested_delimiter='__',
        extra='ignore',
    )

    PROJECT_NAME: str = 'Venue Booking Core'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'venue_booking'

    @property
    def DATABASE_DSN(self) -> str:
        return (
            f'postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # asyncpg pool
    ASYNCPG_POOL_MIN_SIZE: int = 5
    ASYNCPG_POOL_MAX_SIZE: int = 20
    ASYNCPG_POOL_COMMAND_TIMEOUT: float = 10.0
    ASYNCPG_POOL_MAX_INACTIVE_LIFETIME: float = 300.0
    ASYNCPG_POOL_TIMEOUT: float = 10.0

    # Kafka
    KAFKA_PRODUCER_INSTANCE_ID: str = os.getenv(
        'KAFKA_PRODUCER_INSTANCE_ID', f'producer-{os.getpid()}'
    )
    KAFKA_BOOTSTRAP_SERVERS: str = 'localhost:9092'
    KAFKA_SECURITY_PROTOCOL: str = 'PLAINTEXT'
    KAFKA_ACKS: str = 'all'
    KAFKA_RETRIES: int = 3
    KAFKA_LINGER_MS: int = 10
    KAFKA_COMPRESSION_TYPE: str = 'snappy'

    # Event topics
    KAFKA_TOPIC_BOOKING_CREATED: str = 'booking-created'
    KAFKA_TOPIC_BOOKING_EVENTS: str = 'booking-events'

    @property
    def KAFKA_PRODUCER_CONFIG(self) -> dict:
        return {
            'bootstrap.servers': self.KAFKA_BOOTSTRAP_SERVERS,
            'security.protocol': self.KAFKA_SECURITY_PROTOCOL,
            'client.id': self.KAFKA_PRODUCER_INSTANCE_ID,
            'enable.idempotence': True,
            'acks': self.KAFKA_ACKS,
            'retries': self.KAFKA_RETRIES,
            'linger.ms': self.KAFKA_LINGER_MS,
            'compression.type': self.KAFKA_COMPRESSION_TYPE,
        }

    # Resilience policies, one per logical operation
    RESILIENCE_AVAILABILITY_CHECK: ResiliencePolicySettings = ResiliencePolicySettings()
    RESILIENCE_AVAILABILITY_QUERY: ResiliencePolicySettings = ResiliencePolicySettings()
    RESILIENCE_BOOKING_CREATION: ResiliencePolicySettings = ResiliencePolicySettings(
        MAX_CONCURRENT_CALLS=25,
    )
    RESILIENCE_BOOKING_CANCELLATION: ResiliencePolicySettings = ResiliencePolicySettings()


settings = Settings()  # type: ignore
