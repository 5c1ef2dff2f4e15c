"""
Slot availability for one barber on one day.

A slot is bookable when it is not booked by a non-cancelled appointment, not
marked unavailable by the barber, not on a day the barber blocked entirely,
not already started (today only), and passes the duration conflict policy.
"""

import logging
from datetime import date, datetime
from typing import Callable, Collection, List, Optional, Sequence, Set

from pydantic import BaseModel, Field

from booking.blocks import expand_duration_blocks
from booking.slots import TIME_SLOTS, is_slot_passed
from config import settings
from models.appointment import AppointmentStatus
from utils.datetime_utils import shop_now
from utils.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# (start label, service duration, labels already taken, slot grid) -> conflict?
DurationConflictPolicy = Callable[[str, int, Collection[str], Sequence[str]], bool]


def no_duration_conflict(
    start: str,
    duration_minutes: int,
    taken: Collection[str],
    slots: Sequence[str] = TIME_SLOTS,
) -> bool:
    """Treat every start time as independent of the service length."""
    return False


def consecutive_blocks_conflict(
    start: str,
    duration_minutes: int,
    taken: Collection[str],
    slots: Sequence[str] = TIME_SLOTS,
) -> bool:
    """Reject a start time when any block the service needs is taken."""
    return any(
        label in taken for label in expand_duration_blocks(start, duration_minutes, slots)
    )


def default_duration_policy() -> DurationConflictPolicy:
    if settings.strict_duration_check:
        return consecutive_blocks_conflict
    return no_duration_conflict


class Availability(BaseModel):
    """Result of an availability check."""

    barber_name: str
    date: date
    available: List[str] = Field(default_factory=list)
    booked: List[str] = Field(default_factory=list)
    unavailable: List[str] = Field(default_factory=list)
    past: List[str] = Field(default_factory=list)
    whole_day_unavailable: bool = False

    def is_available(self, label: str) -> bool:
        return label in self.available


class AvailabilityResolver:
    """Computes bookable slot labels from the appointment and unavailability tables."""

    def __init__(
        self,
        db,
        duration_policy: Optional[DurationConflictPolicy] = None,
        slots: Optional[List[str]] = None,
    ):
        self.db = db
        self.duration_policy = duration_policy or default_duration_policy()
        self.slots = list(TIME_SLOTS if slots is None else slots)

    async def _booked_times(self, barber_name: str, day: date) -> Set[str]:
        try:
            appointments = await self.db.get_appointments_by_barber(barber_name, day)
        except DatabaseError as e:
            logger.error(
                f"Failed to load booked times for {barber_name} on {day}: {e}",
                exc_info=True,
            )
            return set()
        return {
            apt.time
            for apt in appointments
            if apt.date == day and apt.status != AppointmentStatus.CANCELLED
        }

    async def _unavailable_times(self, barber_name: str, day: date):
        try:
            records = await self.db.get_unavailability_for_date(barber_name, day)
        except DatabaseError as e:
            logger.error(
                f"Failed to load unavailability for {barber_name} on {day}: {e}",
                exc_info=True,
            )
            return False, set()
        whole_day = any(record.is_whole_day for record in records)
        times = {
            record.time for record in records if not record.is_whole_day and record.time
        }
        return whole_day, times

    async def resolve(
        self,
        barber_name: str,
        day: date,
        duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Availability:
        """
        Compute the bookable slots.

        Lookup failures are logged and treated as "no restriction" so the
        customer can still pick a time.

        Args:
            barber_name: Barber to check
            day: Calendar day to check
            duration_minutes: Service length; enables the duration policy
            now: Shop wall-clock time (defaults to the current time)
        """
        now = now or shop_now()

        booked = await self._booked_times(barber_name, day)
        whole_day, unavailable = await self._unavailable_times(barber_name, day)

        result = Availability(
            barber_name=barber_name,
            date=day,
            booked=[label for label in self.slots if label in booked],
            unavailable=[label for label in self.slots if label in unavailable],
            whole_day_unavailable=whole_day,
        )

        if whole_day:
            return result

        taken = booked | unavailable
        for label in self.slots:
            if label in taken:
                continue
            if is_slot_passed(label, day, now):
                result.past.append(label)
                continue
            if duration_minutes and self.duration_policy(
                label, duration_minutes, taken, self.slots
            ):
                continue
            result.available.append(label)

        return result
