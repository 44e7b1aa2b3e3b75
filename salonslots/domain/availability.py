"""
Core business logic for calculating bookable appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date, datetime
from typing import List, Sequence

import pendulum
from pendulum import DateTime

from .filters import (
    SlotPredicate,
    apply_filters,
    before_closing,
    free_of_bookings,
    not_in_past,
    outside_lunch_break,
)
from .models import Booking, ScheduleConstraints, Slot, SlotQuery
from .slot_generator import at_time_of_day, day_start, generate_candidate_slots

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"


class AvailabilityCalculator:
    """
    Calculates bookable start times for one professional on one day.

    Algorithm:
    1. Generate candidates from opening time, one every step, each ending
       at or before closing time
    2. Drop candidates that already started (relative to ``now``)
    3. Drop candidates overlapping the lunch break
    4. Drop candidates running past closing time
    5. Drop candidates overlapping an existing booking
    6. Return the survivors in chronological order

    The calculator holds configuration only and may be shared freely.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE, step_minutes: int | None = None):
        self.timezone = timezone
        self.step_minutes = step_minutes

    def find_available_slots(self, query: SlotQuery) -> List[Slot]:
        """
        Find every bookable slot for the query.

        Args:
            query: Selected date, schedule, duration, bookings and ``now``

        Returns:
            List of Slot objects, possibly empty
        """
        schedule = query.professional
        if schedule is None or not schedule.has_working_hours:
            return []

        now = query.now if query.now is not None else pendulum.now(self.timezone)
        now = self._localize(now)
        bookings = [
            Booking(start=self._localize(booking.start), end=self._localize(booking.end))
            for booking in query.existing_bookings
        ]

        candidates = generate_candidate_slots(
            selected_date=query.selected_date,
            schedule=schedule,
            service_duration_minutes=query.service_duration_minutes,
            timezone=self.timezone,
            step_minutes=self.step_minutes,
        )
        predicates = self.build_predicates(
            selected_date=query.selected_date,
            schedule=schedule,
            bookings=bookings,
            now=now,
        )

        slots = list(apply_filters(candidates, predicates))

        logger.debug(
            "%d slot(s) available on %s for %d minute service",
            len(slots),
            query.selected_date,
            query.service_duration_minutes,
        )
        return slots

    def build_predicates(
        self,
        *,
        selected_date: date,
        schedule: ScheduleConstraints,
        bookings: Sequence[Booking],
        now: DateTime,
    ) -> List[SlotPredicate]:
        """Resolve the schedule onto the selected day and build the filter pipeline."""
        day = day_start(selected_date, self.timezone)

        closing = at_time_of_day(day, schedule.work_end) if schedule.work_end is not None else None

        lunch_start = lunch_end = None
        if schedule.has_lunch_break:
            lunch_start = at_time_of_day(day, schedule.lunch_start)
            lunch_end = at_time_of_day(day, schedule.lunch_end)

        return [
            not_in_past(now),
            outside_lunch_break(lunch_start, lunch_end),
            before_closing(closing),
            free_of_bookings(bookings),
        ]

    def _localize(self, value: datetime) -> DateTime:
        """Read a naive timestamp as wall-clock time in the calculator's timezone."""
        return pendulum.instance(value, tz=self.timezone)


def find_available_slots(
    selected_date: date,
    professional: ScheduleConstraints | None,
    service_duration_minutes: int,
    existing_bookings: Sequence[Booking] = (),
    now: DateTime | None = None,
    *,
    timezone: str = DEFAULT_TIMEZONE,
    step_minutes: int | None = None,
) -> List[Slot]:
    """Convenience wrapper building a one-off calculator and query."""
    calculator = AvailabilityCalculator(timezone=timezone, step_minutes=step_minutes)
    return calculator.find_available_slots(
        SlotQuery(
            selected_date=selected_date,
            professional=professional,
            service_duration_minutes=service_duration_minutes,
            existing_bookings=tuple(existing_bookings),
            now=now,
        )
    )
