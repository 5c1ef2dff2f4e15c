"""In-progress booking draft held by the booking wizard."""

import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.barber import Barber
from models.service import Service


class CustomerInfo(BaseModel):
    """Contact details typed in by the customer."""

    name: str = ""
    phone: str = ""
    email: str = ""


class BookingDraft(BaseModel):
    """Wizard selections; discarded on close, emptied after success."""

    barber: Optional[Barber] = None
    service: Optional[Service] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    booking_id: Optional[str] = None

    def is_complete(self) -> bool:
        """Everything needed to submit is present."""
        return bool(
            self.barber
            and self.service
            and self.date
            and self.time
            and self.customer.name.strip()
            and self.customer.phone.strip()
        )

    def reset(self) -> None:
        self.barber = None
        self.service = None
        self.date = None
        self.time = None
        self.customer = CustomerInfo()
        self.booking_id = None

    def to_state(self) -> Dict[str, Any]:
        """JSON-safe form for FSM storage."""
        return self.model_dump(mode="json")

    @classmethod
    def from_state(cls, data: Optional[Dict[str, Any]]) -> "BookingDraft":
        return cls.model_validate(data or {})
