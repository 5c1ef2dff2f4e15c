"""
The shop's fixed grid of 20-minute slot labels and helpers to read them.
Labels are wall-clock times in the shop's timezone ("9:00 AM" ... "9:00 PM").
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from utils.constants import SLOT_MINUTES

OPENING_TIME = time(9, 0)
LAST_SLOT_TIME = time(21, 0)


def format_slot_label(value: time) -> str:
    """``time(14, 20)`` -> ``'2:20 PM'``."""
    hour = value.hour % 12 or 12
    period = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {period}"


def parse_slot_label(label: str) -> time:
    """
    ``'2:20 PM'`` -> ``time(14, 20)``.

    Raises:
        ValueError: If the label is not an ``h:mm AM/PM`` time
    """
    try:
        return datetime.strptime(label.strip(), "%I:%M %p").time()
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time slot label: {label!r}") from e


def _build_time_slots(start: time, last: time, step_minutes: int) -> List[str]:
    labels = []
    current = datetime.combine(date.min, start)
    end = datetime.combine(date.min, last)
    while current <= end:
        labels.append(format_slot_label(current.time()))
        current += timedelta(minutes=step_minutes)
    return labels


TIME_SLOTS: List[str] = _build_time_slots(OPENING_TIME, LAST_SLOT_TIME, SLOT_MINUTES)


def slot_index(label: str, slots: Optional[List[str]] = None) -> int:
    """
    Position of a label in the slot grid.

    Raises:
        ValueError: If the label is not part of the grid
    """
    grid = TIME_SLOTS if slots is None else slots
    try:
        return grid.index(label.strip())
    except ValueError as e:
        raise ValueError(f"Unknown time slot: {label!r}") from e


def is_valid_slot(label: str) -> bool:
    return isinstance(label, str) and label.strip() in TIME_SLOTS


def is_slot_passed(label: str, day: date, now: datetime) -> bool:
    """
    True when ``day`` is today (per ``now``) and the slot has already started.

    ``now`` is the shop's wall-clock time; any tzinfo on it is ignored.
    """
    if day != now.date():
        return False
    slot_start = datetime.combine(day, parse_slot_label(label))
    return slot_start < now.replace(tzinfo=None)


def slot_sort_key(label: str) -> time:
    """Sort key that orders labels chronologically; bad labels sort last."""
    try:
        return parse_slot_label(label)
    except ValueError:
        return time.max
