from src.service.booking.app.dto.availability_check_result import AvailabilityCheckResult
from src.service.booking.app.dto.create_booking_outcome import CreateBookingOutcome


__all__ = ['AvailabilityCheckResult', 'CreateBookingOutcome']
