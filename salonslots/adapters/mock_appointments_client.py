"""
Mock appointments client for running without the management API.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingFetchError
from ..domain.models import Booking

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_appointments.json"


class MockAppointmentsClient:
    """
    Mock client that serves appointments from a JSON file.

    Each entry has a ``professionalId`` and ``start``/``end`` timestamps.
    Timestamps without an offset are read in the client's timezone.
    """

    def __init__(self, data_file: Optional[Path] = None, timezone: str = "America/Sao_Paulo"):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file to read, defaults to the bundled sample data
            timezone: IANA timezone for timestamps without an offset
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.timezone = timezone
        self.appointments = self._load_appointments()

    def _load_appointments(self) -> List[Dict]:
        """Load mock appointments from the JSON file."""
        if not self.data_file.exists():
            logger.warning("Mock data file %s not found, serving no appointments", self.data_file)
            return []

        with open(self.data_file, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise BookingFetchError(f"Invalid mock data file {self.data_file}: {e}") from e

        if not isinstance(data, list):
            raise BookingFetchError(f"Mock data file {self.data_file} must contain a list of appointments")
        return data

    async def get_bookings(
        self,
        professional_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        return self.fetch_bookings(professional_id, start_time, end_time)

    def fetch_bookings(
        self,
        professional_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """
        Get the professional's mock appointments overlapping the window.

        Raises:
            BookingFetchError: If a matching entry is malformed
        """
        bookings: List[Booking] = []

        for entry in self.appointments:
            if entry.get("professionalId") != professional_id:
                continue

            try:
                start = pendulum.parse(entry["start"], tz=self.timezone)
                end = pendulum.parse(entry["end"], tz=self.timezone)
            except (KeyError, TypeError, ValueError) as e:
                raise BookingFetchError(f"Malformed mock appointment {entry!r}: {e}") from e

            if start < end_time and end > start_time:
                bookings.append(Booking(start=start, end=end))

        return bookings
