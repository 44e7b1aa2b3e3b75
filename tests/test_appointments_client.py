"""
Tests for the bookings source adapters.
"""

import asyncio
import json

import pendulum
import pytest
import requests

from salonslots.adapters.appointments_client import AppointmentsClient
from salonslots.adapters.mock_appointments_client import MockAppointmentsClient
from salonslots.domain.exceptions import BookingFetchError

TZ = "America/Sao_Paulo"
DAY_START = pendulum.datetime(2025, 11, 14, tz=TZ)
DAY_END = DAY_START.end_of("day")


class FakeResponse:
    def __init__(self, payload=None, status_code=200, reason="OK", text=None):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self._text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


@pytest.fixture
def captured(monkeypatch):
    """Patch requests.get and record the call."""
    calls = []

    def install(response=None, exc=None):
        def fake_get(url, **kwargs):
            calls.append({"url": url, **kwargs})
            if exc is not None:
                raise exc
            return response

        monkeypatch.setattr(requests, "get", fake_get)
        return calls

    return install


class TestAppointmentsClient:
    """Tests for AppointmentsClient."""

    def test_fetch_builds_scoped_request(self, captured):
        calls = captured(FakeResponse([]))
        client = AppointmentsClient("http://api.local/", api_token="secret", timeout=5, timezone=TZ)

        client.fetch_bookings(7, DAY_START, DAY_END)

        assert calls[0]["url"] == "http://api.local/api/appointments"
        params = calls[0]["params"]
        assert params["professionalId"] == "7"
        assert params["startDate"].startswith("2025-11-14T03:00:00")
        assert pendulum.parse(params["startDate"]) == DAY_START
        assert pendulum.parse(params["endDate"]) == DAY_END
        assert calls[0]["headers"]["Authorization"] == "Bearer secret"
        assert calls[0]["timeout"] == 5

    def test_parses_appointments_into_local_bookings(self, captured):
        captured(
            FakeResponse(
                [
                    {
                        "id": 101,
                        "professional_id": 1,
                        "appointment_date": "2025-11-14T17:00:00.000Z",
                        "end_date": "2025-11-14T18:00:00.000Z",
                        "status": "confirmed",
                    }
                ]
            )
        )
        client = AppointmentsClient("http://api.local", timezone=TZ)

        bookings = client.fetch_bookings(1, DAY_START, DAY_END)

        assert len(bookings) == 1
        assert bookings[0].start == pendulum.datetime(2025, 11, 14, 14, 0, tz=TZ)
        assert bookings[0].end.format("HH:mm") == "15:00"
        assert bookings[0].start.timezone_name == TZ

    def test_no_token_no_authorization_header(self, captured):
        calls = captured(FakeResponse([]))

        AppointmentsClient("http://api.local").fetch_bookings(1, DAY_START, DAY_END)

        assert "Authorization" not in calls[0]["headers"]

    def test_network_error(self, captured):
        captured(exc=requests.exceptions.ConnectionError("refused"))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match="refused"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_http_error_uses_api_message(self, captured):
        captured(FakeResponse({"message": "Professional not found"}, status_code=404, reason="Not Found"))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match=r"\(404\): Professional not found"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_http_error_without_json_body(self, captured):
        captured(FakeResponse(status_code=502, reason="Bad Gateway", text="<html>"))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match="Bad Gateway"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_invalid_json(self, captured):
        captured(FakeResponse(text="not json"))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match="not valid JSON"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_non_list_payload(self, captured):
        captured(FakeResponse({"data": []}))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match="JSON array"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_malformed_row_fails_the_fetch(self, captured):
        """Skipping a bad row would show a busy period as free."""
        captured(FakeResponse([{"appointment_date": "2025-11-14T17:00:00Z"}]))
        client = AppointmentsClient("http://api.local")

        with pytest.raises(BookingFetchError, match="Malformed appointment"):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_async_get_bookings(self, captured):
        captured(
            FakeResponse(
                [{"appointment_date": "2025-11-14T17:00:00Z", "end_date": "2025-11-14T18:00:00Z"}]
            )
        )
        client = AppointmentsClient("http://api.local", timezone=TZ)

        bookings = asyncio.run(client.get_bookings(1, DAY_START, DAY_END))

        assert [b.start.format("HH:mm") for b in bookings] == ["14:00"]


class TestMockAppointmentsClient:
    """Tests for MockAppointmentsClient."""

    def test_bundled_data_is_scoped_by_professional_and_day(self):
        client = MockAppointmentsClient(timezone=TZ)

        bookings = client.fetch_bookings(1, DAY_START, DAY_END)

        assert [(b.start.format("HH:mm"), b.end.format("HH:mm")) for b in bookings] == [
            ("14:00", "15:00"),
            ("16:30", "17:00"),
        ]

    def test_custom_data_file(self, tmp_path):
        data_file = tmp_path / "appointments.json"
        data_file.write_text(
            json.dumps(
                [
                    {"professionalId": 3, "start": "2025-11-14T09:00:00", "end": "2025-11-14T09:30:00"},
                    {"professionalId": 3, "start": "2025-11-13T09:00:00", "end": "2025-11-13T09:30:00"},
                ]
            ),
            encoding="utf-8",
        )
        client = MockAppointmentsClient(data_file=data_file, timezone=TZ)

        bookings = asyncio.run(client.get_bookings(3, DAY_START, DAY_END))

        assert len(bookings) == 1
        assert bookings[0].start == pendulum.datetime(2025, 11, 14, 9, 0, tz=TZ)

    def test_missing_data_file(self, tmp_path):
        client = MockAppointmentsClient(data_file=tmp_path / "missing.json")

        assert client.fetch_bookings(1, DAY_START, DAY_END) == []

    def test_malformed_entry(self, tmp_path):
        data_file = tmp_path / "appointments.json"
        data_file.write_text(json.dumps([{"professionalId": 1, "start": "2025-11-14T09:00:00"}]))
        client = MockAppointmentsClient(data_file=data_file, timezone=TZ)

        with pytest.raises(BookingFetchError):
            client.fetch_bookings(1, DAY_START, DAY_END)

    def test_invalid_json_data_file(self, tmp_path):
        data_file = tmp_path / "appointments.json"
        data_file.write_text("[{not json", encoding="utf-8")

        with pytest.raises(BookingFetchError, match="Invalid mock data file"):
            MockAppointmentsClient(data_file=data_file, timezone=TZ)

    def test_data_file_must_hold_a_list(self, tmp_path):
        data_file = tmp_path / "appointments.json"
        data_file.write_text(json.dumps({"professionalId": 1}), encoding="utf-8")

        with pytest.raises(BookingFetchError, match="list of appointments"):
            MockAppointmentsClient(data_file=data_file, timezone=TZ)
