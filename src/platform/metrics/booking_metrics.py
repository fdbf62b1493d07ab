from prometheus_client import Counter, Gauge


class BookingMetrics:
    """
    Booking core metrics collector

    Tracks booking outcomes and the behaviour of the resilience policies
    (breaker state, retries, bulkhead rejections) per named policy.
    """

    # Gauge value per circuit breaker state
    CIRCUIT_STATE_VALUES = {'closed': 0, 'half_open': 1, 'open': 2}

    def __init__(self):
        # ========== Booking Business Metrics ==========
        self.booking_outcomes = Counter(
            'booking_outcomes_total',
            'Booking creation outcomes',
            ['result'],  # result: pending_payment/conflict/failed
        )

        self.booking_cancellations = Counter(
            'booking_cancellations_total',
            'Bookings moved to CANCELLED',
        )

        self.event_publish_failures = Counter(
            'booking_event_publish_failures_total',
            'Domain events that could not be handed to the event bus',
            ['topic'],
        )

        # ========== Resilience Metrics ==========
        self.circuit_breaker_state = Gauge(
            'circuit_breaker_state',
            'Circuit breaker state (0=closed, 1=half_open, 2=open)',
            ['name'],
        )

        self.circuit_breaker_transitions = Counter(
            'circuit_breaker_transitions_total',
            'Circuit breaker state transitions',
            ['name', 'from_state', 'to_state'],
        )

        self.circuit_breaker_rejections = Counter(
            'circuit_breaker_not_permitted_calls_total',
            'Calls rejected by an open circuit breaker',
            ['name'],
        )

        self.retry_attempts = Counter(
            'retry_attempts_total',
            'Retry attempts after a failed call',
            ['name'],
        )

        self.bulkhead_rejections = Counter(
            'bulkhead_rejected_calls_total',
            'Calls rejected by a saturated bulkhead',
            ['name'],
        )

    def record_booking_outcome(self, *, result: str):
        self.booking_outcomes.labels(result=result).inc()

    def record_circuit_transition(self, *, name: str, from_state: str, to_state: str):
        self.circuit_breaker_transitions.labels(
            name=name, from_state=from_state, to_state=to_state
        ).inc()
        self.circuit_breaker_state.labels(name=name).set(self.CIRCUIT_STATE_VALUES[to_state])


# Global metrics instance
metrics = BookingMetrics()
