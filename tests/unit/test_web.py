"""
Unit tests for the HTTP API.
"""

from datetime import date, timedelta

import pytest
import pytest_asyncio
from aiohttp import FormData
from aiohttp.test_utils import TestClient, TestServer, make_mocked_request

from admin.auth import DeveloperSessionStore, SessionStore
from models.appointment import Appointment
from models.gallery import GalleryImage
from models.unavailability import UnavailabilityCreate
from utils.datetime_utils import shop_today
from utils.exceptions import DatabaseError
from web import create_app, error_middleware, security_headers_middleware


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def developer_sessions():
    return DeveloperSessionStore()


@pytest.fixture
def app(mock_db, sessions, developer_sessions):
    """Create test application."""
    return create_app(db=mock_db, sessions=sessions, developer_sessions=developer_sessions)


@pytest_asyncio.fixture
async def client(app):
    async with TestClient(TestServer(app)) as test_client:
        yield test_client


def auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestMiddleware:
    """Test security headers and error mapping."""

    @pytest.mark.asyncio
    async def test_security_headers(self):
        from aiohttp import web

        async def handler(request):
            return web.json_response({})

        request = make_mocked_request("GET", "/api/admin/appointments")
        response = await security_headers_middleware(request, handler)

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    @pytest.mark.asyncio
    async def test_database_error_is_502(self):
        async def handler(request):
            raise DatabaseError("boom")

        request = make_mocked_request("GET", "/api/barbers")
        response = await error_middleware(request, handler)

        assert response.status == 502


    @pytest.mark.asyncio
    async def test_model_validation_error_is_400(self):
        async def handler(request):
            UnavailabilityCreate(barber_name=1, date=date(2030, 1, 15))

        request = make_mocked_request("POST", "/api/admin/unavailability")
        response = await error_middleware(request, handler)

        assert response.status == 400


class TestPublicRoutes:
    """Test routes that need no login."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")
        assert response.status == 200
        data = await response.json()
        assert data["status"] == "ok"

    @pytest.mark.asyncio
    async def test_site_content(self, client, mock_db):
        mock_db.get_gallery_images.side_effect = DatabaseError("down")

        response = await client.get("/api/site")

        assert response.status == 200
        data = await response.json()
        assert data["priority_fee"] == 20
        assert [b["name"] for b in data["barbers"]] == ["Kean", "Pao", "Gelo"]
        assert data["about_images"] == []
        assert data["contact"]["phone"] == "09555672389"
        assert data["contact"]["email"] == "swatbarbershop22@gmail.com"
        assert "Don Pepe" in data["contact"]["address"]
        assert data["hero"]["stats"][0] == {"value": "5k+", "label": "Happy Clients"}
        assert data["hero"]["tagline"].startswith("Master barbers.")

    @pytest.mark.asyncio
    async def test_availability(self, client, mock_db):
        day = (shop_today() + timedelta(days=3)).isoformat()

        response = await client.get(f"/api/availability?barber=Kean&date={day}&service=1")

        assert response.status == 200
        data = await response.json()
        assert len(data["available"]) == 37

    @pytest.mark.asyncio
    async def test_availability_bad_date(self, client):
        response = await client.get("/api/availability?barber=Kean&date=tomorrow")

        assert response.status == 400
        data = await response.json()
        assert data["status"] == "error"
        assert data["error"] == "validation_failed"

    @pytest.mark.asyncio
    async def test_create_booking(self, client, mock_db):
        async def create(record):
            return Appointment(id="new-booking", **record.model_dump())

        mock_db.create_appointment.side_effect = create
        day = (shop_today() + timedelta(days=2)).isoformat()

        response = await client.post(
            "/api/bookings",
            json={
                "barber": "1",
                "service": "1",
                "date": day,
                "time": "9:00 AM",
                "name": "Juan Dela Cruz",
                "phone": "09123456789",
            },
        )

        assert response.status == 201
        data = await response.json()
        assert data["booking_id"] == "new-booking"
        assert data["price"] == 169
        assert data["receipt_filename"] == "booking-confirmation-Juan-Dela-Cruz-new-booking.pdf"

    @pytest.mark.asyncio
    async def test_create_booking_taken_slot(self, client, mock_db, make_appointment):
        day = shop_today() + timedelta(days=2)
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=day, time="9:00 AM")
        ]

        response = await client.post(
            "/api/bookings",
            json={
                "barber": "Kean",
                "service": "Sharp & Styled",
                "date": day.isoformat(),
                "time": "9:00 AM",
                "name": "Juan",
                "phone": "09123456789",
            },
        )

        assert response.status == 409

    @pytest.mark.asyncio
    async def test_create_booking_outside_window(self, client):
        day = (shop_today() + timedelta(days=30)).isoformat()

        response = await client.post(
            "/api/bookings",
            json={"barber": "1", "service": "1", "date": day, "time": "9:00 AM",
                  "name": "Juan", "phone": "09123456789"},
        )

        assert response.status == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, value",
        [("time", 900), ("barber", 1), ("service", ["1"]), ("name", {"first": "Juan"})],
    )
    async def test_create_booking_wrong_field_type(self, client, mock_db, field, value):
        day = (shop_today() + timedelta(days=2)).isoformat()
        payload = {
            "barber": "1",
            "service": "1",
            "date": day,
            "time": "9:00 AM",
            "name": "Juan",
            "phone": "09123456789",
        }
        payload[field] = value

        response = await client.post("/api/bookings", json=payload)

        assert response.status == 400
        data = await response.json()
        assert data["error"] == "validation_failed"
        mock_db.create_appointment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_booking_numeric_date(self, client):
        response = await client.post(
            "/api/bookings",
            json={"barber": "1", "service": "1", "date": 20300115, "time": "9:00 AM",
                  "name": "Juan", "phone": "09123456789"},
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        response = await client.post("/api/bookings", data="not json")
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_booking_receipt(self, client, mock_db, make_appointment):
        mock_db.get_appointment_by_id.return_value = make_appointment(id="abc")

        response = await client.get("/api/bookings/abc/receipt")

        assert response.status == 200
        assert response.content_type == "application/pdf"
        assert "booking-confirmation-Juan-Dela-Cruz-abc.pdf" in response.headers["Content-Disposition"]

    @pytest.mark.asyncio
    async def test_booking_receipt_missing(self, client, mock_db):
        mock_db.get_appointment_by_id.return_value = None

        response = await client.get("/api/bookings/nope/receipt")

        assert response.status == 404


class TestAdminRoutes:
    """Test dashboard routes."""

    @pytest.mark.asyncio
    async def test_login_and_list(self, client, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [make_appointment(barber_name="Pao")]

        response = await client.post(
            "/api/admin/login", json={"username": "Pao", "password": "Barber"}
        )
        assert response.status == 200
        token = (await response.json())["token"]

        response = await client.get("/api/admin/appointments?view=pending", headers=auth(token))

        assert response.status == 200
        data = await response.json()
        assert data["view"] == "pending"
        assert len(data["appointments"]) == 1
        mock_db.get_appointments_by_barber.assert_awaited_with("Pao")

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        response = await client.post(
            "/api/admin/login", json={"username": "Pao", "password": "nope"}
        )

        assert response.status == 401
        assert (await response.json())["message"] == "Access denied"

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/admin/appointments")
        assert response.status == 401

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client, sessions):
        session = sessions.login("Kean", "Barber")

        await client.post("/api/admin/logout", headers=auth(session.token))
        response = await client.get("/api/admin/appointments", headers=auth(session.token))

        assert response.status == 401

    @pytest.mark.asyncio
    async def test_patch_status_forbidden_for_other_barber(
        self, client, sessions, mock_db, make_appointment
    ):
        session = sessions.login("Gelo", "Barber")
        mock_db.get_appointment_by_id.return_value = make_appointment(barber_name="Kean")

        response = await client.patch(
            "/api/admin/appointments/apt-1", json={"status": "completed"}, headers=auth(session.token)
        )

        assert response.status == 403

    @pytest.mark.asyncio
    async def test_delete_cascade(self, client, sessions, mock_db, make_appointment):
        session = sessions.login("Kean", "Barber")
        mock_db.get_appointment_by_id.return_value = make_appointment(booking_group="g")
        mock_db.get_booking_group.return_value = [make_appointment(booking_group="g")]
        mock_db.delete_appointments.return_value = 1

        response = await client.delete("/api/admin/appointments/apt-1", headers=auth(session.token))

        assert response.status == 200
        assert (await response.json())["deleted"] == 1

    @pytest.mark.asyncio
    async def test_clear_scoped_to_barber(self, client, sessions, mock_db):
        session = sessions.login("Pao", "Barber")
        mock_db.delete_barber_appointments.return_value = 4

        response = await client.delete("/api/admin/appointments", headers=auth(session.token))

        assert (await response.json())["deleted"] == 4
        mock_db.delete_all_appointments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_receipt(self, client, sessions, mock_db, make_appointment):
        session = sessions.login("Kean", "Barber")
        mock_db.get_appointment_by_id.return_value = make_appointment()
        mock_db.upload_file.return_value = "https://cdn/r.pdf"
        mock_db.update_appointment_files.return_value = make_appointment(receipt_url="https://cdn/r.pdf")

        form = FormData()
        form.add_field("kind", "receipt")
        form.add_field("file", b"%PDF-1.4", filename="r.pdf", content_type="application/pdf")
        response = await client.post(
            "/api/admin/appointments/apt-1/files", data=form, headers=auth(session.token)
        )

        assert response.status == 200
        assert (await response.json())["appointment"]["receipt_url"] == "https://cdn/r.pdf"

    @pytest.mark.asyncio
    async def test_mark_unavailability(self, client, sessions, mock_db):
        session = sessions.login("Pao", "Barber")
        mock_db.create_unavailability.return_value = []
        day = (shop_today() + timedelta(days=1)).isoformat()

        response = await client.post(
            "/api/admin/unavailability",
            json={"date": day, "whole_day": True, "reason": "Day off"},
            headers=auth(session.token),
        )

        assert response.status == 201
        (records,) = mock_db.create_unavailability.await_args.args
        assert records[0].is_whole_day is True


    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"whole_day": False, "times": [900]},
            {"whole_day": False, "times": "1:00 PM"},
            {"whole_day": True, "barber": 1},
            {"whole_day": True, "reason": ["sick"]},
        ],
    )
    async def test_unavailability_wrong_field_type(self, client, sessions, mock_db, body):
        session = sessions.login("Kean", "Barber")
        day = (shop_today() + timedelta(days=1)).isoformat()

        response = await client.post(
            "/api/admin/unavailability", json={"date": day, **body}, headers=auth(session.token)
        )

        assert response.status == 400
        assert (await response.json())["status"] == "error"
        mock_db.create_unavailability.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_must_be_string(self, client, sessions, mock_db):
        session = sessions.login("Kean", "Barber")

        response = await client.patch(
            "/api/admin/appointments/apt-1", json={"status": 1}, headers=auth(session.token)
        )

        assert response.status == 400
        mock_db.update_appointment_status.assert_not_awaited()


class TestGalleryRoutes:
    """Test gallery routes."""

    @pytest.mark.asyncio
    async def test_public_listing(self, client, mock_db):
        mock_db.get_gallery_images.return_value = [
            GalleryImage(id="g1", filename="a.jpg", image_type="after", storage_path="https://x/a.jpg")
        ]

        response = await client.get("/api/gallery?type=after")

        assert response.status == 200
        image = (await response.json())["images"][0]
        assert image["id"] == "g1"
        assert image["url"] == "https://x/a.jpg"

    @pytest.mark.asyncio
    async def test_add_requires_developer_login(self, client):
        response = await client.post(
            "/api/developer/gallery", json={"url": "https://x/a.jpg", "image_type": "before"}
        )
        assert response.status == 401

    @pytest.mark.asyncio
    async def test_developer_add_and_clear(self, client, mock_db):
        response = await client.post("/api/developer/login", json={"password": "devpass"})
        token = (await response.json())["token"]
        mock_db.create_gallery_image.return_value = GalleryImage(
            id="g2", filename="a.jpg", image_type="before", storage_path="https://x/a.jpg"
        )
        mock_db.delete_gallery_images.return_value = 3

        response = await client.post(
            "/api/developer/gallery",
            json={"url": "https://x/a.jpg", "image_type": "before"},
            headers=auth(token),
        )
        assert response.status == 201

        response = await client.delete("/api/developer/gallery?type=about", headers=auth(token))
        assert (await response.json())["deleted"] == 3

    @pytest.mark.asyncio
    async def test_developer_logout_revokes_token(self, client, developer_sessions):
        session = developer_sessions.login("devpass")

        response = await client.post("/api/developer/logout", headers=auth(session.token))
        assert response.status == 200

        response = await client.delete("/api/developer/gallery/g1", headers=auth(session.token))
        assert response.status == 401
