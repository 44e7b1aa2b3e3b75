"""
Appointment availability engine for salon professionals.
"""

from .domain import (
    AvailabilityCalculator,
    Booking,
    BookingFetchError,
    Professional,
    ScheduleConstraints,
    Slot,
    SlotQuery,
    find_available_slots,
)
from .services import AvailabilityQuery, AvailabilityResult, AvailabilityState

__version__ = "0.1.0"

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityQuery",
    "AvailabilityResult",
    "AvailabilityState",
    "Booking",
    "BookingFetchError",
    "Professional",
    "ScheduleConstraints",
    "Slot",
    "SlotQuery",
    "find_available_slots",
]
