"""Dashboard, schedule and gallery management behind login sessions."""

from .auth import AdminSession, DeveloperSession, DeveloperSessionStore, SessionStore
from .dashboard import AdminDashboard, AppointmentView
from .gallery import GalleryManager
from .unavailability import UnavailabilityManager

__all__ = [
    "AdminDashboard",
    "AdminSession",
    "AppointmentView",
    "DeveloperSession",
    "DeveloperSessionStore",
    "GalleryManager",
    "SessionStore",
    "UnavailabilityManager",
]
