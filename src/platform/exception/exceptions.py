class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ServiceUnavailableError(CustomBaseError):
    """A dependency could not be reached after retries, or a resilience policy refused the call."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class CallNotPermittedError(ServiceUnavailableError):
    def __init__(self, breaker_name: str) -> None:
        super().__init__(f'CircuitBreaker {breaker_name!r} is OPEN and does not permit calls')
        self.breaker_name = breaker_name


class BulkheadFullError(ServiceUnavailableError):
    def __init__(self, bulkhead_name: str) -> None:
        super().__init__(f'Bulkhead {bulkhead_name!r} is full and does not permit calls')
        self.bulkhead_name = bulkhead_name
