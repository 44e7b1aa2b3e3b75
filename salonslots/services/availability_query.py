"""
Application service tying the bookings source to the availability engine.

The query fetches the professional's existing bookings for the selected day
through a bookings source adapter and hands them to the domain-level
``AvailabilityCalculator``. It also tracks the state a scheduling screen
needs (disabled, loading, ready, error) and makes sure that a slow response
for an abandoned selection never overwrites the result of a newer one.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Protocol, Tuple

import pendulum
from pendulum import DateTime

from ..domain.availability import AvailabilityCalculator
from ..domain.exceptions import BookingFetchError
from ..domain.models import Booking, Professional, Slot, SlotQuery
from ..domain.slot_generator import day_start

logger = logging.getLogger(__name__)


class BookingSourceProtocol(Protocol):
    """Protocol describing the bookings source behaviour needed by the query."""

    async def get_bookings(
        self,
        professional_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """
        Return the professional's bookings overlapping the window.

        Implementations scope the result to ``professional_id`` and raise
        ``BookingFetchError`` when the data cannot be obtained.
        """


class AvailabilityState(str, enum.Enum):
    DISABLED = "disabled"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class AvailabilityResult:
    """Snapshot of the query as seen by its caller."""
    state: AvailabilityState
    slots: List[Slot] = field(default_factory=list)
    error: Optional[BookingFetchError] = None

    @property
    def is_loading(self) -> bool:
        return self.state is AvailabilityState.LOADING

    @classmethod
    def disabled(cls) -> "AvailabilityResult":
        return cls(state=AvailabilityState.DISABLED)

    @classmethod
    def loading(cls) -> "AvailabilityResult":
        return cls(state=AvailabilityState.LOADING)


class AvailabilityQuery:
    """
    Computes available slots for the current selection.

    Every ``refresh`` restarts the cycle: ``DISABLED`` when no professional
    is selected (nothing is fetched), otherwise ``LOADING`` until the
    bookings arrive, then ``READY`` or ``ERROR``. A newer refresh supersedes
    an older one: the older fetch is cancelled on a best-effort basis and
    whatever it eventually returns is discarded.
    """

    def __init__(
        self,
        booking_source: BookingSourceProtocol,
        calculator: AvailabilityCalculator,
        clock: Optional[Callable[[], DateTime]] = None,
    ) -> None:
        self._booking_source = booking_source
        self._calculator = calculator
        self._clock = clock or (lambda: pendulum.now(calculator.timezone))
        self._generation = 0
        self._pending: Optional[asyncio.Future] = None
        self._result = AvailabilityResult.disabled()

    @property
    def result(self) -> AvailabilityResult:
        """Latest snapshot."""
        return self._result

    async def refresh(
        self,
        *,
        selected_date: date,
        professional: Optional[Professional],
        service_duration_minutes: int,
    ) -> AvailabilityResult:
        """
        Recompute availability for a new selection.

        Returns:
            The resulting snapshot. A call superseded while waiting for its
            bookings returns the snapshot of the newer selection instead.
        """
        self._generation += 1
        generation = self._generation
        self._cancel_pending()

        if professional is None:
            self._result = AvailabilityResult.disabled()
            return self._result

        self._result = AvailabilityResult.loading()
        start_time, end_time = self._day_window(selected_date)

        logger.info(
            "Fetching bookings for professional %s on %s",
            professional.id,
            start_time.to_date_string(),
        )
        fetch = asyncio.ensure_future(
            self._booking_source.get_bookings(
                professional_id=professional.id,
                start_time=start_time,
                end_time=end_time,
            )
        )
        self._pending = fetch

        try:
            bookings = await fetch
        except asyncio.CancelledError:
            if fetch.cancelled() and generation != self._generation:
                logger.debug("Bookings fetch for professional %s superseded", professional.id)
                return self._result
            raise
        except BookingFetchError as exc:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded fetch: %s", exc)
                return self._result
            logger.warning("Could not fetch bookings for professional %s: %s", professional.id, exc)
            self._pending = None
            self._result = AvailabilityResult(state=AvailabilityState.ERROR, error=exc)
            return self._result
        except Exception:
            if generation == self._generation:
                self._pending = None
                self._result = AvailabilityResult(state=AvailabilityState.ERROR)
            raise

        if generation != self._generation:
            logger.warning(
                "Discarding stale bookings for professional %s on %s",
                professional.id,
                start_time.to_date_string(),
            )
            return self._result

        self._pending = None
        slots = self._calculator.find_available_slots(
            SlotQuery(
                selected_date=selected_date,
                professional=professional.schedule,
                service_duration_minutes=service_duration_minutes,
                existing_bookings=tuple(bookings),
                now=self._clock(),
            )
        )
        self._result = AvailabilityResult(state=AvailabilityState.READY, slots=slots)
        return self._result

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _day_window(self, selected_date: date) -> Tuple[DateTime, DateTime]:
        start = day_start(selected_date, self._calculator.timezone)
        return start, start.end_of("day")
