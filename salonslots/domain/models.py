"""
Domain models for schedules, bookings and bookable slots.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Any, Mapping, Sequence

from pendulum import DateTime


def intervals_overlap(
    start: DateTime,
    end: DateTime,
    other_start: DateTime,
    other_end: DateTime,
) -> bool:
    """Half-open overlap test: touching intervals do not overlap."""
    return start < other_end and end > other_start


def parse_time_of_day(value: Any) -> time | None:
    """
    Parse a time-of-day as stored on the professional record.

    Accepts ``time`` objects, ``"HH:MM"`` and ``"HH:MM:SS"`` strings.
    ``None`` and blank strings mean the bound is not set.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported time-of-day value: {value!r}")

    text = value.strip()
    if not text:
        return None

    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise ValueError(f"Expected HH:MM, got {value!r}")

    return time(hour=int(parts[0]), minute=int(parts[1]))


@dataclass(frozen=True)
class ScheduleConstraints:
    """
    Working calendar of a professional for a single day.

    Every bound is optional. A missing bound means "no constraint": without
    working hours nothing is bookable, without a lunch pair there is no break.
    Values are taken as given; inconsistent bounds are not repaired.
    """
    work_start: time | None = None
    work_end: time | None = None
    lunch_start: time | None = None
    lunch_end: time | None = None

    @property
    def has_working_hours(self) -> bool:
        return self.work_start is not None and self.work_end is not None

    @property
    def has_lunch_break(self) -> bool:
        return self.lunch_start is not None and self.lunch_end is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScheduleConstraints":
        """
        Build constraints from a professional record as returned by the API.

        Args:
            data: Mapping with ``work_start_time``, ``work_end_time``,
                ``lunch_start_time`` and ``lunch_end_time`` keys (any may be
                missing or null)

        Returns:
            ScheduleConstraints instance
        """
        return cls(
            work_start=parse_time_of_day(data.get("work_start_time")),
            work_end=parse_time_of_day(data.get("work_end_time")),
            lunch_start=parse_time_of_day(data.get("lunch_start_time")),
            lunch_end=parse_time_of_day(data.get("lunch_end_time")),
        )


@dataclass(frozen=True)
class Professional:
    """A professional whose agenda is being queried."""
    id: int
    name: str
    schedule: ScheduleConstraints


@dataclass(frozen=True)
class Booking:
    """
    An appointment already booked for the professional on the queried day.

    Carries no professional id: the bookings source scopes the list to one
    professional before it reaches the engine.
    """
    start: DateTime
    end: DateTime

    def conflicts_with(self, start: DateTime, end: DateTime) -> bool:
        """Check whether ``[start, end)`` overlaps this booking."""
        return intervals_overlap(start, end, self.start, self.end)


@dataclass(frozen=True)
class Slot:
    """
    A bookable start time for a service of fixed duration.
    """
    start: DateTime
    duration_minutes: int

    @property
    def end(self) -> DateTime:
        return self.start.add(minutes=self.duration_minutes)

    @property
    def label(self) -> str:
        """24-hour, zero padded ``HH:MM`` label."""
        return self.start.format("HH:mm")

    def to_dict(self) -> dict:
        return {"label": self.label, "start": self.start.isoformat()}

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class SlotQuery:
    """
    Input envelope for a single availability computation.

    ``now`` left as ``None`` means the real clock is read when the query is
    evaluated.
    """
    selected_date: date
    professional: ScheduleConstraints | None
    service_duration_minutes: int
    existing_bookings: Sequence[Booking] = ()
    now: DateTime | None = None
