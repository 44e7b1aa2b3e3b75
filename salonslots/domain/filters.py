"""
Composable slot predicates.

Each factory returns a predicate ``Slot -> bool`` that is True when the slot
survives. The predicates are independent of each other, so the order in
which they are applied never changes the outcome.
"""

from typing import Callable, Iterable, Iterator, Sequence

from pendulum import DateTime

from .models import Booking, Slot, intervals_overlap

SlotPredicate = Callable[[Slot], bool]


def not_in_past(now: DateTime) -> SlotPredicate:
    """Reject slots starting before ``now``. A slot starting at ``now`` is kept."""

    def predicate(slot: Slot) -> bool:
        return slot.start >= now

    return predicate


def outside_lunch_break(
    lunch_start: DateTime | None,
    lunch_end: DateTime | None,
) -> SlotPredicate:
    """
    Reject slots overlapping ``[lunch_start, lunch_end)``.

    Without both bounds there is no break and every slot passes.
    """
    if lunch_start is None or lunch_end is None:
        return lambda slot: True

    def predicate(slot: Slot) -> bool:
        return not intervals_overlap(slot.start, slot.end, lunch_start, lunch_end)

    return predicate


def before_closing(closing: DateTime | None) -> SlotPredicate:
    """Reject slots that would still be running after closing time."""
    if closing is None:
        return lambda slot: True

    def predicate(slot: Slot) -> bool:
        return slot.end <= closing

    return predicate


def free_of_bookings(bookings: Iterable[Booking]) -> SlotPredicate:
    """
    Reject slots overlapping any existing booking.

    Back-to-back appointments are allowed: touching intervals do not clash.
    """
    booked = list(bookings)

    def predicate(slot: Slot) -> bool:
        slot_end = slot.end
        return not any(booking.conflicts_with(slot.start, slot_end) for booking in booked)

    return predicate


def apply_filters(
    candidates: Iterable[Slot],
    predicates: Sequence[SlotPredicate],
) -> Iterator[Slot]:
    """Lazily keep the candidates accepted by every predicate, in input order."""
    for slot in candidates:
        if all(predicate(slot) for predicate in predicates):
            yield slot
