"""
Candidate slot generation for a single working day.

Produces every start time between opening and closing at a fixed step,
without looking at lunch breaks, bookings or the clock. Those are the
filter pipeline's job.
"""

from datetime import date, datetime, time
from typing import Iterator

import pendulum
from pendulum import DateTime

from .models import ScheduleConstraints, Slot


def day_start(selected_date: date, timezone: str) -> DateTime:
    """
    Resolve the selected date to midnight in the given timezone.

    A plain ``date`` is taken as that calendar day. A ``datetime`` is first
    converted into ``timezone`` (naive values are assumed to already be in
    it) and its calendar day is used.
    """
    if isinstance(selected_date, datetime):
        moment = pendulum.instance(selected_date, tz=timezone).in_timezone(timezone)
        return moment.start_of("day")

    return pendulum.datetime(
        selected_date.year,
        selected_date.month,
        selected_date.day,
        tz=timezone,
    )


def at_time_of_day(day: DateTime, time_of_day: time) -> DateTime:
    """Place a wall-clock time on the given day."""
    return day.set(
        hour=time_of_day.hour,
        minute=time_of_day.minute,
        second=0,
        microsecond=0,
    )


def generate_candidate_slots(
    selected_date: date,
    schedule: ScheduleConstraints | None,
    service_duration_minutes: int,
    timezone: str,
    step_minutes: int | None = None,
) -> Iterator[Slot]:
    """
    Lazily yield candidate slots from opening time onwards.

    Args:
        selected_date: Day to generate slots for
        schedule: Working calendar, or None when no professional is selected
        service_duration_minutes: Length of every slot
        timezone: IANA timezone the schedule's wall-clock times refer to
        step_minutes: Distance between consecutive starts; defaults to the
            service duration

    Yields:
        Slots in chronological order whose occupied interval ends at or
        before closing time
    """
    if schedule is None or not schedule.has_working_hours:
        return

    step = service_duration_minutes if step_minutes is None else step_minutes
    if service_duration_minutes <= 0 or step <= 0:
        return

    day = day_start(selected_date, timezone)
    opening = at_time_of_day(day, schedule.work_start)
    closing = at_time_of_day(day, schedule.work_end)

    current = opening
    while current.add(minutes=service_duration_minutes) <= closing:
        yield Slot(start=current, duration_minutes=service_duration_minutes)
        current = current.add(minutes=step)
