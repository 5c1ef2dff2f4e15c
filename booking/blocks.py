"""
Duration blocks: a service longer than one slot is stored as several
consecutive 20-minute appointment rows.
"""

import math
from typing import List, Optional

from booking.slots import TIME_SLOTS, slot_index
from models.appointment import DURATION_BLOCK_SUFFIX
from utils.constants import DURATION_BLOCK_LABEL, SLOT_MINUTES
from utils.exceptions import ValidationError


def blocks_needed(duration_minutes: int) -> int:
    """Number of 20-minute slots a service occupies (at least one)."""
    return max(1, math.ceil(duration_minutes / SLOT_MINUTES))


def expand_duration_blocks(
    start: str, duration_minutes: int, slots: Optional[List[str]] = None
) -> List[str]:
    """
    Consecutive slot labels covering a service that starts at ``start``.

    The result stops at the end of the grid: no wraparound and no rollover
    into the next day, so a late start yields fewer blocks than needed.

    Raises:
        ValidationError: If ``start`` is not a slot label
    """
    grid = TIME_SLOTS if slots is None else slots
    try:
        index = slot_index(start, grid)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return grid[index:index + blocks_needed(duration_minutes)]


def block_service_name(service_name: str, block_number: int, total_blocks: int) -> str:
    """
    Service label stored on a block. Block 1 keeps the plain name.

    Args:
        service_name: Undecorated service name
        block_number: 1-based position of the block
        total_blocks: Number of blocks in the booking
    """
    if total_blocks <= 1 or block_number <= 1:
        return service_name
    return f"{service_name} ({DURATION_BLOCK_LABEL} {block_number} of {total_blocks})"


def strip_block_suffix(service: str) -> str:
    """Recover the base service name from a block label."""
    return DURATION_BLOCK_SUFFIX.sub("", service)


def is_block_of(service: str, base_service: str) -> bool:
    """True for the base service itself or any of its duration blocks."""
    if service == base_service:
        return True
    return (
        DURATION_BLOCK_SUFFIX.search(service) is not None
        and strip_block_suffix(service) == base_service
    )
