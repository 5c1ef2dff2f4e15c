"""Barber roster."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Barber(BaseModel):
    """Barber shown in the booking wizard and the about section."""

    id: str
    name: str
    experience: str
    expertise: str
    specialties: List[str] = Field(default_factory=list)


BARBERS = [
    Barber(
        id="1",
        name="Kean",
        experience="Expert",
        expertise="Classic cuts & hot towel shaves",
        specialties=["Classic Cuts", "Beard Styling", "Hot Towel Shave"],
    ),
    Barber(
        id="2",
        name="Pao",
        experience="Skilled",
        expertise="Modern styles & precision fades",
        specialties=["Modern Styles", "Fade Cuts", "Hair Washing"],
    ),
    Barber(
        id="3",
        name="Gelo",
        experience="Skilled",
        expertise="Traditional cuts & scalp treatments",
        specialties=["Traditional Cuts", "Mustache Grooming", "Scalp Treatment"],
    ),
]


def get_all_barbers() -> List[Barber]:
    return list(BARBERS)


def get_barber(barber_id: str) -> Optional[Barber]:
    for barber in BARBERS:
        if barber.id == barber_id:
            return barber
    return None


def get_barber_by_name(name: str) -> Optional[Barber]:
    for barber in BARBERS:
        if barber.name.lower() == name.strip().lower():
            return barber
    return None
