"""
Adapters layer - Sources of existing bookings.
"""

from .appointments_client import AppointmentsClient
from .mock_appointments_client import MockAppointmentsClient

__all__ = ["AppointmentsClient", "MockAppointmentsClient"]
