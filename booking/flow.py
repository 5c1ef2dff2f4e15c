"""
Booking wizard state machine.

Steps: barber -> service -> date & time -> customer info -> confirmation ->
success. The draft lives only as long as the wizard; it is stored in the
Telegram FSM data between messages via to_state()/from_state().
"""

import logging
from datetime import date, timedelta
from enum import IntEnum
from typing import Any, Dict, List, Optional

from booking.availability import Availability, AvailabilityResolver
from booking.slots import is_valid_slot
from booking.submission import BookingSubmitter
from config import settings
from models.appointment import Appointment
from models.barber import get_barber
from models.booking import BookingDraft, CustomerInfo
from models.service import get_service
from utils.constants import MAX_NAME_LENGTH
from utils.datetime_utils import shop_today
from utils.exceptions import SlotNotAvailableError, ValidationError
from utils.validation import sanitize_text, validate_email, validate_phone

logger = logging.getLogger(__name__)


class BookingStep(IntEnum):
    BARBER = 0
    SERVICE = 1
    DATE_TIME = 2
    CUSTOMER_INFO = 3
    CONFIRMATION = 4
    SUCCESS = 5

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    BookingStep.BARBER: "Select Barber",
    BookingStep.SERVICE: "Choose Service",
    BookingStep.DATE_TIME: "Select Date & Time",
    BookingStep.CUSTOMER_INFO: "Fill Up Information",
    BookingStep.CONFIRMATION: "Confirmation",
    BookingStep.SUCCESS: "Booking Confirmed",
}


def booking_window(today: Optional[date] = None) -> List[date]:
    """Days a customer may pick: today through the configured window."""
    start = today or shop_today()
    return [start + timedelta(days=i) for i in range(settings.booking_window_days + 1)]


class BookingFlow:
    """Drives one customer's way through the booking wizard."""

    def __init__(
        self,
        db,
        draft: Optional[BookingDraft] = None,
        step: BookingStep = BookingStep.BARBER,
        resolver: Optional[AvailabilityResolver] = None,
        submitter: Optional[BookingSubmitter] = None,
    ):
        self.db = db
        self.draft = draft or BookingDraft()
        self.step = BookingStep(step)
        self.resolver = resolver or AvailabilityResolver(db)
        self.submitter = submitter or BookingSubmitter(db, self.resolver)
        self.completed: Optional[BookingDraft] = None

    # ========== Selections ==========

    def select_barber(self, barber_id: str) -> None:
        barber = get_barber(barber_id)
        if barber is None:
            raise ValidationError("Unknown barber")
        self.draft.barber = barber
        self.step = BookingStep.SERVICE

    def select_service(self, service_id: str) -> None:
        service = get_service(service_id)
        if service is None:
            raise ValidationError("Unknown service")
        self.draft.service = service
        self.step = BookingStep.DATE_TIME

    def select_date(self, day: date, today: Optional[date] = None) -> None:
        """Pick a day inside the booking window; clears any chosen time."""
        window = booking_window(today)
        if day < window[0] or day > window[-1]:
            raise ValidationError(
                f"Appointments are available up to "
                f"{settings.booking_window_days} days in advance"
            )
        self.draft.date = day
        self.draft.time = None

    async def available_times(self) -> Availability:
        """Bookable times for the chosen barber/date; safe to call again to refresh."""
        if not self.draft.barber or not self.draft.date:
            raise ValidationError("Please select a barber and a date first")
        duration = self.draft.service.duration_minutes if self.draft.service else None
        return await self.resolver.resolve(self.draft.barber.name, self.draft.date, duration)

    async def select_time(self, label: str) -> None:
        if not is_valid_slot(label):
            raise ValidationError("Unknown time slot")
        availability = await self.available_times()
        if not availability.is_available(label):
            raise SlotNotAvailableError(f"{label} is not available")
        self.draft.time = label.strip()

    def set_customer_info(self, name: str, phone: str, email: str = "") -> None:
        name = sanitize_text(name, MAX_NAME_LENGTH)
        phone = sanitize_text(phone, 20)
        email = sanitize_text(email, 254)
        if phone and not validate_phone(phone):
            raise ValidationError("Please enter a valid contact number")
        if email and not validate_email(email):
            raise ValidationError("Please enter a valid email address")
        self.draft.customer = CustomerInfo(name=name, phone=phone, email=email)

    # ========== Navigation ==========

    def can_proceed(self) -> bool:
        draft = self.draft
        if self.step == BookingStep.BARBER:
            return draft.barber is not None
        if self.step == BookingStep.SERVICE:
            return draft.service is not None
        if self.step == BookingStep.DATE_TIME:
            return draft.date is not None and draft.time is not None
        if self.step == BookingStep.CUSTOMER_INFO:
            return bool(draft.customer.name.strip() and draft.customer.phone.strip())
        if self.step == BookingStep.CONFIRMATION:
            return True
        return False

    def advance(self) -> BookingStep:
        """Move to the next step. Confirmation moves on only through confirm()."""
        if self.step >= BookingStep.CONFIRMATION:
            raise ValidationError("Confirm the booking to continue")
        if not self.can_proceed():
            raise ValidationError(f"Please complete '{self.step.title}' first")
        self.step = BookingStep(self.step + 1)
        return self.step

    def back(self) -> BookingStep:
        if BookingStep.BARBER < self.step < BookingStep.SUCCESS:
            self.step = BookingStep(self.step - 1)
        return self.step

    async def confirm(self) -> List[Appointment]:
        """
        Submit the booking from the confirmation step.

        On success the filled draft moves to ``completed`` (for the success
        screen and receipt) and the working draft is emptied.
        """
        if self.step != BookingStep.CONFIRMATION:
            raise ValidationError("Nothing to confirm yet")
        appointments = await self.submitter.submit(self.draft)
        self.completed = self.draft.model_copy(deep=True)
        self.draft.reset()
        self.step = BookingStep.SUCCESS
        return appointments

    def close(self) -> None:
        """Discard the draft and start over."""
        self.draft.reset()
        self.completed = None
        self.step = BookingStep.BARBER

    # ========== Persistence ==========

    def to_state(self) -> Dict[str, Any]:
        return {
            "step": int(self.step),
            "draft": self.draft.to_state(),
            "completed": self.completed.to_state() if self.completed else None,
        }

    @classmethod
    def from_state(cls, db, data: Optional[Dict[str, Any]], **kwargs) -> "BookingFlow":
        data = data or {}
        flow = cls(
            db,
            draft=BookingDraft.from_state(data.get("draft")),
            step=BookingStep(data.get("step", BookingStep.BARBER)),
            **kwargs,
        )
        if data.get("completed"):
            flow.completed = BookingDraft.from_state(data["completed"])
        return flow
