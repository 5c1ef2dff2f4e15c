"""Barber time-off: whole days or individual slots that cannot be booked."""

import logging
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional

from admin.auth import AdminSession
from booking.slots import is_valid_slot, slot_sort_key
from models.unavailability import UnavailabilityCreate, UnavailabilitySlot
from utils.constants import MAX_REASON_LENGTH
from utils.datetime_utils import shop_today
from utils.exceptions import (
    AuthorizationError,
    UnavailabilityNotFoundError,
    ValidationError,
)
from utils.validation import sanitize_text

logger = logging.getLogger(__name__)


class UnavailabilityManager:
    """Marks and lists unavailability for the logged-in barber."""

    def __init__(self, db, session: AdminSession):
        self.db = db
        self.session = session

    def _barber(self, barber_name: Optional[str]) -> str:
        name = barber_name or self.session.barber_name
        if not self.session.can_manage(name):
            raise AuthorizationError("You can only manage your own schedule")
        return name

    async def mark_whole_day(
        self, day: date, reason: str = "", barber_name: Optional[str] = None
    ) -> List[UnavailabilitySlot]:
        record = UnavailabilityCreate(
            barber_name=self._barber(barber_name),
            date=day,
            is_whole_day=True,
            reason=sanitize_text(reason, MAX_REASON_LENGTH) or None,
        )
        saved = await self.db.create_unavailability([record])
        logger.info(f"{record.barber_name} unavailable all day on {day}")
        return saved

    async def mark_time_slots(
        self,
        day: date,
        times: Iterable[str],
        reason: str = "",
        barber_name: Optional[str] = None,
    ) -> List[UnavailabilitySlot]:
        """
        Block several slots of one day in a single insert.

        Raises:
            ValidationError: No times given or a label is not on the slot grid
        """
        labels = []
        for label in times:
            if not isinstance(label, str):
                raise ValidationError(f"Unknown time slot: {label}")
            label = label.strip()
            if not is_valid_slot(label):
                raise ValidationError(f"Unknown time slot: {label}")
            if label not in labels:
                labels.append(label)
        if not labels:
            raise ValidationError("Please select at least one time slot")

        barber = self._barber(barber_name)
        reason = sanitize_text(reason, MAX_REASON_LENGTH) or None
        records = [
            UnavailabilityCreate(barber_name=barber, date=day, time=label, reason=reason)
            for label in labels
        ]
        saved = await self.db.create_unavailability(records)
        logger.info(f"{barber} unavailable on {day} at {', '.join(labels)}")
        return saved

    async def remove(self, slot_id: str) -> None:
        record = await self.db.get_unavailability_by_id(slot_id)
        if record is None:
            raise UnavailabilityNotFoundError(f"Unavailability {slot_id} not found")
        self._barber(record.barber_name)
        if not await self.db.delete_unavailability(slot_id):
            raise UnavailabilityNotFoundError(f"Unavailability {slot_id} not found")
        logger.info(f"Removed unavailability {slot_id} for {record.barber_name}")

    async def list_upcoming(self, barber_name: Optional[str] = None) -> List[UnavailabilitySlot]:
        """Today's and later records, sorted by date then time (whole days first)."""
        records = await self.db.get_upcoming_unavailability(
            self._barber(barber_name), shop_today()
        )
        return sorted(
            records,
            key=lambda r: (r.date, not r.is_whole_day, slot_sort_key(r.time or "")),
        )

    async def grouped_by_date(
        self, barber_name: Optional[str] = None
    ) -> Dict[date, List[UnavailabilitySlot]]:
        grouped: Dict[date, List[UnavailabilitySlot]] = OrderedDict()
        for record in await self.list_upcoming(barber_name):
            grouped.setdefault(record.date, []).append(record)
        return grouped
