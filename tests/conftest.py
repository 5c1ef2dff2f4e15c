"""
Pytest configuration and shared fixtures.
"""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from admin.auth import AdminSession
from models.appointment import Appointment
from utils.datetime_utils import utc_now


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch):
    """Pin settings for all tests."""
    from config import settings

    monkeypatch.setattr(settings, "bot_token", "test_token")
    monkeypatch.setattr(settings, "supabase_url", "https://test.supabase.co")
    monkeypatch.setattr(settings, "supabase_key", "test_key")
    monkeypatch.setattr(settings, "storage_bucket", "appointment-files")
    monkeypatch.setattr(settings, "shop_timezone", "Asia/Manila")
    monkeypatch.setattr(settings, "priority_fee", 20)
    monkeypatch.setattr(settings, "booking_window_days", 15)
    monkeypatch.setattr(settings, "strict_duration_check", True)
    monkeypatch.setattr(settings, "barber_accounts", "Kean:Barber:admin,Pao:Barber,Gelo:Barber")
    monkeypatch.setattr(settings, "admin_session_hours", 12)
    monkeypatch.setattr(settings, "webdev_password", "devpass")
    monkeypatch.setattr(settings, "webdev_session_hours", 24)
    monkeypatch.setattr(settings, "max_upload_bytes", 5 * 1024 * 1024)
    monkeypatch.setattr(settings, "environment", "test")
    yield settings


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = MagicMock()
    mock_table = MagicMock()
    mock_client.table.return_value = mock_table
    return mock_client, mock_table


@pytest.fixture
def mock_db():
    """Database client double; every method is awaitable."""
    db = AsyncMock()
    db.get_appointments.return_value = []
    db.get_appointments_by_barber.return_value = []
    db.get_unavailability_for_date.return_value = []
    db.get_upcoming_unavailability.return_value = []
    db.get_gallery_images.return_value = []
    return db


@pytest.fixture
def make_appointment():
    """Build Appointment objects with sensible defaults."""

    def _make(**overrides) -> Appointment:
        data = {
            "id": "apt-1",
            "barber_name": "Kean",
            "customer_name": "Juan Dela Cruz",
            "customer_phone": "09123456789",
            "customer_email": "juan@example.com",
            "service": "Sharp & Styled",
            "date": date(2030, 1, 15),
            "time": "9:00 AM",
            "status": "pending",
            "price": 169,
        }
        data.update(overrides)
        return Appointment(**data)

    return _make


def _session(name: str, is_admin: bool) -> AdminSession:
    now = utc_now()

    return AdminSession(
        token=f"token-{name}",
        barber_name=name,
        is_admin=is_admin,
        issued_at=now,
        expires_at=now + timedelta(hours=12),
    )


@pytest.fixture
def admin_session() -> AdminSession:
    return _session("Kean", True)


@pytest.fixture
def barber_session() -> AdminSession:
    return _session("Pao", False)
