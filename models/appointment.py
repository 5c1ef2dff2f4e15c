"""Appointment models: one record per reserved 20-minute slot."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from utils.constants import DURATION_BLOCK_LABEL

DURATION_BLOCK_SUFFIX = re.compile(
    rf" \({DURATION_BLOCK_LABEL} (\d+) of (\d+)\)$"
)


class AppointmentStatus(str, Enum):
    """Appointment status. Any status may be set from any other."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(BaseModel):
    """Appointment row as stored in the ``appointments`` table."""

    id: Optional[str] = None
    barber_name: str
    customer_name: str
    customer_phone: str
    customer_email: str = ""
    service: str
    date: date
    time: str = Field(..., description="Slot label, e.g. '9:20 AM'")
    status: AppointmentStatus = AppointmentStatus.PENDING
    price: int = Field(default=0, ge=0)
    receipt_url: Optional[str] = None
    notes_url: Optional[str] = None
    notes: Optional[str] = None
    booking_group: Optional[str] = Field(
        None, description="Shared by every duration block of one booking"
    )
    created_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "barber_name": "Kean",
                "customer_name": "Juan Dela Cruz",
                "customer_phone": "09123456789",
                "customer_email": "juan@example.com",
                "service": "Sharp & Styled",
                "date": "2026-10-20",
                "time": "9:00 AM",
                "status": "pending",
                "price": 169,
            }
        }

    @property
    def base_service(self) -> str:
        """Service name without any duration block suffix."""
        return DURATION_BLOCK_SUFFIX.sub("", self.service)

    @property
    def is_duration_block(self) -> bool:
        """True for the second and later blocks of a multi-slot booking."""
        return DURATION_BLOCK_SUFFIX.search(self.service) is not None


class AppointmentCreate(BaseModel):
    """Appointment creation model."""

    barber_name: str
    customer_name: str
    customer_phone: str
    customer_email: str = ""
    service: str
    date: date
    time: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    price: int = Field(default=0, ge=0)
    booking_group: Optional[str] = None

    class Config:
        use_enum_values = True
