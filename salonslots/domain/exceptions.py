"""
Domain-specific exception hierarchy for the availability engine.
"""


class SalonSlotsError(Exception):
    """Base class for all application-level errors."""


class BookingFetchError(SalonSlotsError):
    """Raised when existing bookings cannot be fetched or parsed."""
