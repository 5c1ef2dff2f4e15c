"""Barber unavailability models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class UnavailabilitySlot(BaseModel):
    """Row of the ``unavailable_slots`` table."""

    id: Optional[str] = None
    barber_name: str
    date: date
    time: Optional[str] = Field(None, description="Absent for whole-day records")
    is_whole_day: bool = False
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class UnavailabilityCreate(BaseModel):
    """Unavailability creation model."""

    barber_name: str
    date: date
    time: Optional[str] = None
    is_whole_day: bool = False
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_time_or_whole_day(self) -> "UnavailabilityCreate":
        """A record either blocks a whole day or names one slot."""
        if self.is_whole_day:
            self.time = None
        elif not self.time:
            raise ValueError("time is required unless is_whole_day is set")
        return self
