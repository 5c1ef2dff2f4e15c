"""
Turns a finished booking draft into appointment rows.

One row per 20-minute block. The first block carries the plain service name
and the price plus the priority fee; the rest carry a "(Duration Block k of N)"
label and price 0. All rows share a booking_group id.
"""

import asyncio
import logging
import uuid
from typing import List, Optional

from booking.availability import AvailabilityResolver
from booking.blocks import block_service_name, expand_duration_blocks
from config import settings
from models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from models.booking import BookingDraft
from utils.constants import MAX_NAME_LENGTH
from utils.exceptions import (
    BookingSubmissionError,
    DatabaseError,
    SlotNotAvailableError,
    ValidationError,
)
from utils.validation import sanitize_text, validate_email, validate_phone

logger = logging.getLogger(__name__)


def validate_draft(draft: BookingDraft) -> None:
    """
    Check a draft before any network call.

    Raises:
        ValidationError: With a user-facing message
    """
    if not draft.is_complete():
        raise ValidationError("Missing booking information")
    if not validate_phone(draft.customer.phone):
        raise ValidationError("Please enter a valid contact number")
    if draft.customer.email and not validate_email(draft.customer.email):
        raise ValidationError("Please enter a valid email address")


def build_appointments(
    draft: BookingDraft, booking_group: str, priority_fee: Optional[int] = None
) -> List[AppointmentCreate]:
    """Expand a complete draft into one creation model per duration block."""
    fee = settings.priority_fee if priority_fee is None else priority_fee
    blocks = expand_duration_blocks(draft.time, draft.service.duration_minutes)
    customer_name = sanitize_text(draft.customer.name, MAX_NAME_LENGTH)

    return [
        AppointmentCreate(
            barber_name=draft.barber.name,
            customer_name=customer_name,
            customer_phone=draft.customer.phone.strip(),
            customer_email=draft.customer.email.strip(),
            service=block_service_name(draft.service.name, number, len(blocks)),
            date=draft.date,
            time=label,
            status=AppointmentStatus.PENDING,
            price=draft.service.price + fee if number == 1 else 0,
            booking_group=booking_group,
        )
        for number, label in enumerate(blocks, start=1)
    ]


class BookingSubmitter:
    """Saves bookings through the Supabase client."""

    def __init__(self, db, resolver: Optional[AvailabilityResolver] = None):
        self.db = db
        self.resolver = resolver or AvailabilityResolver(db)

    async def _rollback(self, saved: List[Appointment]) -> None:
        ids = [apt.id for apt in saved if apt.id]
        if not ids:
            return
        try:
            await self.db.delete_appointments(ids)
            logger.info(f"Rolled back {len(ids)} partially saved duration blocks")
        except DatabaseError as e:
            logger.error(
                f"Failed to roll back duration blocks {ids}: {e}", exc_info=True
            )

    async def submit(self, draft: BookingDraft) -> List[Appointment]:
        """
        Save every duration block of a booking.

        Blocks are inserted concurrently. If any insert fails, the blocks that
        did save are deleted again so no partial booking is left behind.

        Returns:
            Saved appointments in block order; ``draft.booking_id`` is set to
            the first one's id

        Raises:
            ValidationError: Draft incomplete or malformed
            SlotNotAvailableError: Start time no longer bookable
            BookingSubmissionError: Not every block could be saved
        """
        validate_draft(draft)

        availability = await self.resolver.resolve(
            draft.barber.name, draft.date, draft.service.duration_minutes
        )
        if not availability.is_available(draft.time):
            raise SlotNotAvailableError(
                f"{draft.time} is no longer available with {draft.barber.name}"
            )

        records = build_appointments(draft, booking_group=str(uuid.uuid4()))
        logger.info(
            f"Booking {len(records)} block(s) for {draft.customer.name} with "
            f"{draft.barber.name} on {draft.date} at {draft.time}"
        )

        results = await asyncio.gather(
            *(self.db.create_appointment(record) for record in records),
            return_exceptions=True,
        )

        saved = [result for result in results if isinstance(result, Appointment)]
        if len(saved) != len(records):
            for result in results:
                if isinstance(result, BaseException):
                    logger.error(f"Duration block insert failed: {result}")
            await self._rollback(saved)
            raise BookingSubmissionError(
                "Failed to create some appointment slots. Please try again."
            )

        draft.booking_id = saved[0].id
        logger.info(f"Booking saved: {draft.booking_id}")
        return saved
