"""
Bookings source backed by the salon management HTTP API.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import BookingFetchError
from ..domain.models import Booking

logger = logging.getLogger(__name__)


class AppointmentsClient:
    """
    Client for the appointments endpoint of the management API.

    The endpoint already scopes appointments by professional and date
    window, so every returned row is treated as a booking of the requested
    professional.
    """

    APPOINTMENTS_PATH = "/api/appointments"

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 30,
        timezone: str = "America/Sao_Paulo",
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the management API
            api_token: Optional bearer token sent with every request
            timeout: Request timeout in seconds
            timezone: IANA timezone the parsed timestamps are converted to
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.timezone = timezone
        self.headers = {"Accept": "application/json"}
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

    async def get_bookings(
        self,
        professional_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """Fetch bookings without blocking the event loop."""
        return await asyncio.to_thread(
            self.fetch_bookings, professional_id, start_time, end_time
        )

    def fetch_bookings(
        self,
        professional_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """
        Get the professional's appointments inside the time window.

        Args:
            professional_id: Professional whose agenda is requested
            start_time: Start of the time window
            end_time: End of the time window

        Returns:
            List of Booking objects

        Raises:
            BookingFetchError: If the request fails or the response is malformed
        """
        url = f"{self.base_url}{self.APPOINTMENTS_PATH}"
        params = {
            "startDate": start_time.in_timezone("UTC").to_iso8601_string(),
            "endDate": end_time.in_timezone("UTC").to_iso8601_string(),
            "professionalId": str(professional_id),
        }

        logger.debug("GET %s %s", url, params)

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise BookingFetchError(f"Failed to fetch appointments: {e}") from e

        if not response.ok:
            raise BookingFetchError(
                f"Failed to fetch appointments ({response.status_code}): "
                f"{self._error_message(response)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BookingFetchError(f"Appointments response is not valid JSON: {e}") from e

        return self._parse_appointments(data)

    def _parse_appointments(self, data: Any) -> List[Booking]:
        """
        Parse the appointments response into bookings.

        Response format:
        [
            {
                "id": 101,
                "professional_id": 1,
                "appointment_date": "2025-11-14T14:00:00.000Z",
                "end_date": "2025-11-14T15:00:00.000Z",
                "status": "confirmed"
            }
        ]

        A row that cannot be parsed fails the whole fetch; skipping it would
        report a busy period as free.
        """
        if not isinstance(data, list):
            raise BookingFetchError("Appointments response must be a JSON array")

        bookings: List[Booking] = []

        for item in data:
            try:
                start = self._parse_datetime(item["appointment_date"])
                end = self._parse_datetime(item["end_date"])
            except (KeyError, TypeError, ValueError) as e:
                raise BookingFetchError(f"Malformed appointment {item!r}: {e}") from e

            bookings.append(Booking(start=start, end=end))

        return bookings

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """
        Parse an ISO 8601 timestamp to a pendulum DateTime in the client's timezone.
        """
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            payload: Dict[str, Any] = response.json()
        except ValueError:
            return response.reason or "unknown error"

        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.reason or "unknown error"
