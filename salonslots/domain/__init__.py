"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityCalculator, find_available_slots
from .exceptions import BookingFetchError, SalonSlotsError
from .models import Booking, Professional, ScheduleConstraints, Slot, SlotQuery

__all__ = [
    "AvailabilityCalculator",
    "Booking",
    "BookingFetchError",
    "Professional",
    "SalonSlotsError",
    "ScheduleConstraints",
    "Slot",
    "SlotQuery",
    "find_available_slots",
]
