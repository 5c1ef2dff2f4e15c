"""Slot grid, availability, booking submission and receipts."""

from .availability import Availability, AvailabilityResolver
from .blocks import blocks_needed, expand_duration_blocks
from .flow import BookingFlow, BookingStep
from .receipts import receipt_filename, render_booking_receipt
from .slots import TIME_SLOTS
from .submission import BookingSubmitter

__all__ = [
    "Availability",
    "AvailabilityResolver",
    "BookingFlow",
    "BookingStep",
    "BookingSubmitter",
    "TIME_SLOTS",
    "blocks_needed",
    "expand_duration_blocks",
    "receipt_filename",
    "render_booking_receipt",
]
