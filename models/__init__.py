"""Pydantic models for data validation and serialization."""

from .appointment import Appointment, AppointmentCreate, AppointmentStatus
from .barber import Barber, get_all_barbers, get_barber, get_barber_by_name
from .booking import BookingDraft, CustomerInfo
from .gallery import GalleryImage, GalleryImageCreate, ImageType
from .service import Service, get_all_services, get_service
from .unavailability import UnavailabilityCreate, UnavailabilitySlot

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "Barber",
    "BookingDraft",
    "CustomerInfo",
    "GalleryImage",
    "GalleryImageCreate",
    "ImageType",
    "Service",
    "UnavailabilityCreate",
    "UnavailabilitySlot",
    "get_all_barbers",
    "get_all_services",
    "get_barber",
    "get_barber_by_name",
    "get_service",
]
