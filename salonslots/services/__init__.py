"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_query import (
    AvailabilityQuery,
    AvailabilityResult,
    AvailabilityState,
    BookingSourceProtocol,
)

__all__ = [
    "AvailabilityQuery",
    "AvailabilityResult",
    "AvailabilityState",
    "BookingSourceProtocol",
]
