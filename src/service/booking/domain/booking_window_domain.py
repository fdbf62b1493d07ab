"""
Booking Window Domain

Pure time-window rules: overlap and hourly billing. No infrastructure.

Windows are half-open [start, end), so back-to-back bookings never overlap.
"""

from datetime import datetime, timedelta


_ONE_MINUTE = timedelta(minutes=1)


def windows_overlap(
    *, a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    return a_start < b_end and b_start < a_end


def calculate_billed_hours(*, start: datetime, end: datetime) -> int:
    """
    Whole minutes (truncated toward zero) rounded up to whole hours, minimum 1.

    end <= start also bills one hour; callers are trusted to send start < end.
    """
    minutes = (end - start) // _ONE_MINUTE
    if minutes < 0:
        # floor division on a negative delta rounds away from zero
        minutes = -((start - end) // _ONE_MINUTE)
    return max(1, -(-minutes // 60))


def calculate_total_amount_cents(
    *, price_per_hour_cents: int, start: datetime, end: datetime
) -> int:
    return price_per_hour_cents * calculate_billed_hours(start=start, end=end)
