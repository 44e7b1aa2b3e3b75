"""
Tests for candidate slot generation.
"""

import pendulum
from datetime import date, datetime, time

from salonslots.domain.models import ScheduleConstraints
from salonslots.domain.slot_generator import day_start, generate_candidate_slots

TZ = "America/Sao_Paulo"
DAY = date(2025, 11, 14)
SCHEDULE = ScheduleConstraints(work_start=time(9, 0), work_end=time(18, 0))


def labels(slots):
    return [slot.label for slot in slots]


class TestDayStart:
    """Tests for resolving the selected date."""

    def test_plain_date_is_local_midnight(self):
        assert day_start(DAY, TZ) == pendulum.datetime(2025, 11, 14, tz=TZ)

    def test_aware_datetime_is_converted_before_taking_the_day(self):
        """02:00 UTC on the 15th is still the 14th in São Paulo."""
        moment = pendulum.datetime(2025, 11, 15, 2, 0, tz="UTC")

        assert day_start(moment, TZ) == pendulum.datetime(2025, 11, 14, tz=TZ)

    def test_naive_datetime_is_read_in_the_engine_timezone(self):
        assert day_start(datetime(2025, 11, 14, 23, 30), TZ) == pendulum.datetime(2025, 11, 14, tz=TZ)


class TestGenerateCandidateSlots:
    """Tests for generate_candidate_slots."""

    def test_steps_by_service_duration(self):
        """Test that consecutive candidates are one service duration apart."""
        slots = list(generate_candidate_slots(DAY, SCHEDULE, 60, TZ))

        assert labels(slots) == [
            "09:00", "10:00", "11:00", "12:00", "13:00",
            "14:00", "15:00", "16:00", "17:00",
        ]
        assert all(slot.duration_minutes == 60 for slot in slots)

    def test_last_slot_may_end_exactly_at_closing(self):
        slots = list(generate_candidate_slots(DAY, SCHEDULE, 60, TZ))

        assert slots[-1].end == pendulum.datetime(2025, 11, 14, 18, 0, tz=TZ)

    def test_partial_slot_before_closing_is_not_generated(self):
        """A 45 minute service starting 17:15 fits, one starting 18:00 does not exist."""
        slots = list(generate_candidate_slots(DAY, SCHEDULE, 45, TZ))

        assert slots[-1].label == "17:15"
        assert len(slots) == 12

    def test_fixed_step_grid(self):
        """Test a 30 minute grid with a 60 minute service."""
        slots = list(generate_candidate_slots(DAY, SCHEDULE, 60, TZ, step_minutes=30))

        assert labels(slots)[:3] == ["09:00", "09:30", "10:00"]
        assert labels(slots)[-2:] == ["16:30", "17:00"]
        assert "17:30" not in labels(slots)

    def test_no_schedule_yields_nothing(self):
        assert list(generate_candidate_slots(DAY, None, 30, TZ)) == []

    def test_missing_working_hours_yield_nothing(self):
        schedule = ScheduleConstraints(work_start=time(9, 0))

        assert list(generate_candidate_slots(DAY, schedule, 30, TZ)) == []

    def test_non_positive_duration_yields_nothing(self):
        assert list(generate_candidate_slots(DAY, SCHEDULE, 0, TZ)) == []
        assert list(generate_candidate_slots(DAY, SCHEDULE, -30, TZ)) == []

    def test_non_positive_step_yields_nothing(self):
        assert list(generate_candidate_slots(DAY, SCHEDULE, 30, TZ, step_minutes=0)) == []

    def test_service_longer_than_working_day(self):
        schedule = ScheduleConstraints(work_start=time(9, 0), work_end=time(10, 0))

        assert list(generate_candidate_slots(DAY, schedule, 90, TZ)) == []

    def test_is_lazy(self):
        """Test that candidates are produced on demand."""
        candidates = generate_candidate_slots(DAY, SCHEDULE, 30, TZ)

        assert next(candidates).label == "09:00"
        assert next(candidates).label == "09:30"
