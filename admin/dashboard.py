"""
Barber dashboard: appointment listing, status changes, deletions and
attachments.

Every operation runs on behalf of an AdminSession. Admins see and change all
records; other barbers only their own.
"""

import logging
import os
from enum import Enum
from typing import Dict, List, Optional

from admin.auth import AdminSession
from booking.blocks import is_block_of
from booking.receipts import render_booking_receipt
from booking.slots import slot_sort_key
from config import settings
from models.appointment import Appointment, AppointmentStatus
from utils.constants import MAX_NOTES_LENGTH
from utils.datetime_utils import shop_today, utc_now
from utils.exceptions import (
    AppointmentNotFoundError,
    AuthorizationError,
    ValidationError,
)
from utils.validation import sanitize_text, validate_upload

logger = logging.getLogger(__name__)


class AppointmentView(str, Enum):
    """Dashboard tabs."""

    ALL = "all"
    TODAY = "today"
    PENDING = "pending"
    COMPLETED = "completed"


def appointment_sort_key(appointment: Appointment):
    return appointment.date, slot_sort_key(appointment.time)


def filter_view(appointments: List[Appointment], view: AppointmentView, today) -> List[Appointment]:
    """Apply a tab filter. Duration blocks are never listed."""
    view = AppointmentView(view)
    visible = [apt for apt in appointments if not apt.is_duration_block]

    if view == AppointmentView.TODAY:
        visible = [
            apt for apt in visible
            if apt.date == today and apt.status == AppointmentStatus.PENDING
        ]
    elif view == AppointmentView.PENDING:
        visible = [apt for apt in visible if apt.status == AppointmentStatus.PENDING]
    elif view == AppointmentView.COMPLETED:
        visible = [apt for apt in visible if apt.status == AppointmentStatus.COMPLETED]

    return sorted(visible, key=appointment_sort_key)


class AdminDashboard:
    """Appointment management for one logged-in barber."""

    def __init__(self, db, session: AdminSession):
        self.db = db
        self.session = session

    async def _visible_appointments(self) -> List[Appointment]:
        if self.session.is_admin:
            return await self.db.get_appointments()
        return await self.db.get_appointments_by_barber(self.session.barber_name)

    async def _get_owned(self, appointment_id: str) -> Appointment:
        appointment = await self.db.get_appointment_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")
        if not self.session.can_manage(appointment.barber_name):
            raise AuthorizationError("You can only manage your own appointments")
        return appointment

    async def list_appointments(
        self, view: AppointmentView = AppointmentView.ALL
    ) -> List[Appointment]:
        appointments = await self._visible_appointments()
        return filter_view(appointments, view, shop_today())

    async def counts(self) -> Dict[str, int]:
        """Badge numbers for every tab."""
        appointments = await self._visible_appointments()
        today = shop_today()
        return {
            view.value: len(filter_view(appointments, view, today))
            for view in AppointmentView
        }

    async def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Set any status from any other."""
        try:
            status = AppointmentStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown status: {status}") from e

        await self._get_owned(appointment_id)
        updated = await self.db.update_appointment_status(appointment_id, status)
        if updated is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

        logger.info(
            f"{self.session.barber_name} set appointment {appointment_id} to {status.value}"
        )
        return updated

    async def _booking_siblings(self, appointment: Appointment) -> List[Appointment]:
        if appointment.booking_group:
            siblings = await self.db.get_booking_group(appointment.booking_group)
            if siblings:
                return siblings

        # Rows saved without a booking_group: match customer and base service
        candidates = await self.db.find_customer_appointments(
            appointment.barber_name,
            appointment.date,
            appointment.customer_name,
            appointment.customer_phone,
        )
        return [
            apt for apt in candidates
            if is_block_of(apt.service, appointment.base_service)
        ]

    async def delete_appointment(self, appointment_id: str) -> int:
        """
        Delete an appointment together with all of its duration blocks.

        Returns:
            Number of rows deleted
        """
        appointment = await self._get_owned(appointment_id)
        siblings = await self._booking_siblings(appointment)

        ids = [apt.id for apt in siblings if apt.id]
        if appointment_id not in ids:
            ids.append(appointment_id)

        deleted = await self.db.delete_appointments(ids)
        logger.info(
            f"{self.session.barber_name} deleted appointment {appointment_id} "
            f"({len(ids)} block(s))"
        )
        return deleted

    async def clear_appointments(self) -> int:
        """Admins clear every appointment; barbers clear only their own."""
        if self.session.is_admin:
            deleted = await self.db.delete_all_appointments()
        else:
            deleted = await self.db.delete_barber_appointments(self.session.barber_name)
        logger.warning(f"{self.session.barber_name} cleared {deleted} appointment(s)")
        return deleted

    async def attach_file(
        self,
        appointment_id: str,
        kind: str,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> Appointment:
        """
        Upload a payment receipt or notes file and link it to the appointment.

        Raises:
            ValidationError: Wrong file type or too large
        """
        error = validate_upload(kind, content_type, len(data), settings.max_upload_bytes)
        if error:
            raise ValidationError(error)

        await self._get_owned(appointment_id)

        ext = os.path.splitext(filename or "")[1].lstrip(".").lower() or "bin"
        stamp = int(utc_now().timestamp() * 1000)
        path = f"appointments/{appointment_id}-{kind}-{stamp}.{ext}"
        url = await self.db.upload_file(path, data, content_type)

        if kind == "receipt":
            updated = await self.db.update_appointment_files(appointment_id, receipt_url=url)
        else:
            updated = await self.db.update_appointment_files(appointment_id, notes_url=url)
        if updated is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

        logger.info(f"Attached {kind} to appointment {appointment_id}: {path}")
        return updated

    async def update_notes(self, appointment_id: str, text: str) -> Appointment:
        await self._get_owned(appointment_id)
        updated = await self.db.update_appointment_files(
            appointment_id, notes=sanitize_text(text, MAX_NOTES_LENGTH)
        )
        if updated is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")
        return updated

    async def booking_details_receipt(self, appointment_id: str) -> bytes:
        appointment = await self._get_owned(appointment_id)
        return render_booking_receipt(appointment)


def get_view(value: Optional[str]) -> AppointmentView:
    try:
        return AppointmentView(value or AppointmentView.ALL.value)
    except ValueError as e:
        raise ValidationError(f"Unknown view: {value}") from e
