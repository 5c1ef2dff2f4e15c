"""Service catalog for the barbershop."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Service(BaseModel):
    """Bookable service."""

    id: str
    name: str
    description: str = ""
    price: int = Field(..., ge=0, description="Price in PHP, before the priority fee")
    duration_minutes: int = Field(..., ge=20, le=300, description="Duration in minutes")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "1",
                "name": "Sharp & Styled",
                "description": "Modern / Classic Haircut",
                "price": 149,
                "duration_minutes": 20,
            }
        }


class ServiceGroup(BaseModel):
    """A menu entry that opens a choice of options (Korean Perms)."""

    id: str
    name: str
    description: str
    options: List[Service]

    @property
    def price_range(self) -> str:
        prices = [o.price for o in self.options]
        return f"₱{min(prices)} - ₱{max(prices)}"


SERVICES = [
    Service(
        id="1",
        name="Sharp & Styled",
        description="Modern / Classic Haircut",
        price=149,
        duration_minutes=20,
    ),
    Service(
        id="2",
        name="Clean Cut Duo",
        description="Haircut + Shave",
        price=180,
        duration_minutes=30,
    ),
    Service(
        id="4",
        name="SWAT Signature Edge",
        description="Haircut + Hair Art",
        price=200,
        duration_minutes=30,
    ),
    Service(
        id="5",
        name="Little Trooper",
        description="Kids Classic / Modern Haircuts",
        price=170,
        duration_minutes=20,
    ),
]

KOREAN_PERMS = ServiceGroup(
    id="3",
    name="Korean Perms",
    description="Light Perm, Medium Perm, Afro Perm",
    options=[
        Service(id="3a", name="Korean Perms – Light Perm", price=850, duration_minutes=120),
        Service(id="3b", name="Korean Perms – Medium Perm", price=950, duration_minutes=120),
        Service(id="3c", name="Korean Perms – Afro Perm", price=1100, duration_minutes=120),
    ],
)


def get_all_services() -> List[Service]:
    """Every directly bookable service, perm options included."""
    return SERVICES + KOREAN_PERMS.options


def get_service(service_id: str) -> Optional[Service]:
    """Get service by id ('1', '3b', ...)."""
    for service in get_all_services():
        if service.id == service_id:
            return service
    return None


def get_service_by_name(name: str) -> Optional[Service]:
    """Get service by display name; plain hyphens match the en dash."""
    wanted = name.replace(" - ", " – ").strip()
    for service in get_all_services():
        if service.name == wanted:
            return service
    return None
