"""
HTTP API for the public site, the barber dashboard and the gallery page.

Public routes serve site content, availability and bookings. Dashboard and
gallery routes require a bearer token from the matching login route.
"""

import time
from typing import Any, Dict, Optional

from aiohttp import web
from aiohttp.web import Request, Response
from pydantic import ValidationError as PydanticValidationError

from admin.auth import AdminSession, DeveloperSessionStore, SessionStore
from admin.dashboard import AdminDashboard, get_view
from admin.gallery import GalleryManager
from admin.unavailability import UnavailabilityManager
from booking.availability import AvailabilityResolver
from booking.flow import booking_window
from booking.receipts import receipt_filename, render_booking_receipt
from booking.submission import BookingSubmitter
from config import settings
from db import get_db_client
from models.barber import get_all_barbers, get_barber, get_barber_by_name
from models.booking import BookingDraft, CustomerInfo
from models.gallery import ImageType
from models.service import KOREAN_PERMS, SERVICES, get_all_services, get_service, get_service_by_name
from utils.constants import (
    SHOP_ADDRESS,
    SHOP_BADGE,
    SHOP_DIRECTIONS_URL,
    SHOP_EMAIL,
    SHOP_HOURS,
    SHOP_NAME,
    SHOP_PHONE,
    SHOP_STATS,
    SHOP_TAGLINE,
)
from utils.datetime_utils import parse_iso_date, to_iso_string
from utils.exceptions import (
    AppointmentNotFoundError,
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    GalleryImageNotFoundError,
    SlotNotAvailableError,
    UnavailabilityNotFoundError,
    ValidationError,
)
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="web.log", log_dir="logs")

DB_KEY = web.AppKey("db", object)
SESSIONS_KEY = web.AppKey("sessions", SessionStore)
DEVELOPER_SESSIONS_KEY = web.AppKey("developer_sessions", DeveloperSessionStore)
STARTED_KEY = web.AppKey("started_at", float)

# Multipart overhead on top of the largest accepted attachment
_UPLOAD_MARGIN_BYTES = 64 * 1024

NOT_FOUND_ERRORS = (
    AppointmentNotFoundError,
    UnavailabilityNotFoundError,
    GalleryImageNotFoundError,
)


def error_response(status: int, error: str, message: str) -> Response:
    return web.json_response(
        {"status": "error", "error": error, "message": message}, status=status
    )


@web.middleware
async def security_headers_middleware(request: Request, handler):
    """Add security headers to all responses."""
    response = await handler(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Strict-Transport-Security"] = (
        "max-age=31536000; includeSubDomains"
    )
    if request.path.startswith("/api/admin/") or request.path.startswith("/api/developer/"):
        response.headers["Cache-Control"] = "no-store"

    return response


@web.middleware
async def error_middleware(request: Request, handler):
    """Turn service exceptions into JSON error responses."""
    try:
        return await handler(request)
    except ValidationError as e:
        return error_response(400, "validation_failed", str(e))
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        return error_response(400, "validation_failed", f"Invalid value for: {fields}")
    except AuthenticationError as e:
        return error_response(401, "authentication_failed", str(e))
    except AuthorizationError as e:
        return error_response(403, "forbidden", str(e))
    except NOT_FOUND_ERRORS as e:
        return error_response(404, "not_found", str(e))
    except SlotNotAvailableError as e:
        return error_response(409, "slot_not_available", str(e))
    except DatabaseError as e:
        logger.error(f"{request.method} {request.path} failed: {e}", exc_info=True)
        return error_response(
            502, "database_error", "Something went wrong. Please try again."
        )


# ========== Request helpers ==========


async def read_json(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def admin_session(request: Request) -> AdminSession:
    return request.app[SESSIONS_KEY].get(bearer_token(request))


def require_developer(request: Request) -> None:
    request.app[DEVELOPER_SESSIONS_KEY].get(bearer_token(request))


def parse_date_param(value: Optional[str], field: str = "date"):
    if not value:
        raise ValidationError(f"'{field}' is required")
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise ValidationError(f"'{field}' must be a YYYY-MM-DD date") from e


def text_field(payload: Dict[str, Any], field: str, strip: bool = True) -> str:
    """String value of a JSON field; missing or null reads as empty."""
    value = payload.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value.strip() if strip else value


def lookup_barber(value: Optional[str]):
    if value is not None and not isinstance(value, str):
        raise ValidationError("'barber' must be a barber id or name")
    barber = get_barber(value or "") or get_barber_by_name(value or "")
    if barber is None:
        raise ValidationError(f"Unknown barber: {value}")
    return barber


def lookup_service(value: Optional[str]):
    if value is not None and not isinstance(value, str):
        raise ValidationError("'service' must be a service id or name")
    service = get_service(value or "") or get_service_by_name(value or "")
    if service is None:
        raise ValidationError(f"Unknown service: {value}")
    return service


def pdf_response(pdf: bytes, filename: str) -> Response:
    return web.Response(
        body=pdf,
        content_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json")


# ========== Public routes ==========


async def health_check(request: Request) -> Response:
    uptime_seconds = time.time() - request.app[STARTED_KEY]
    return web.json_response(
        {
            "status": "ok",
            "service": "barbershop-booking",
            "timestamp": time.time(),
            "uptime_hours": round(uptime_seconds / 3600, 2),
            "environment": settings.environment,
        }
    )


async def site_content(request: Request) -> Response:
    """Everything the marketing page renders."""
    try:
        about_images = await GalleryManager(request.app[DB_KEY]).list_images(ImageType.ABOUT)
    except DatabaseError as e:
        logger.error(f"Failed to load about images: {e}")
        about_images = []

    return web.json_response(
        {
            "name": SHOP_NAME,
            "hours": SHOP_HOURS,
            "hero": {"badge": SHOP_BADGE, "tagline": SHOP_TAGLINE, "stats": SHOP_STATS},
            "contact": {
                "address": SHOP_ADDRESS,
                "phone": SHOP_PHONE,
                "email": SHOP_EMAIL,
                "directions_url": SHOP_DIRECTIONS_URL,
            },
            "priority_fee": settings.priority_fee,
            "booking_window_days": settings.booking_window_days,
            "barbers": [dump(b) for b in get_all_barbers()],
            "services": [dump(s) for s in SERVICES],
            "service_groups": [
                {**dump(KOREAN_PERMS), "price_range": KOREAN_PERMS.price_range}
            ],
            "about_images": [dump(img) for img in about_images],
        }
    )


async def list_barbers(request: Request) -> Response:
    return web.json_response({"barbers": [dump(b) for b in get_all_barbers()]})


async def list_services(request: Request) -> Response:
    return web.json_response({"services": [dump(s) for s in get_all_services()]})


async def get_availability(request: Request) -> Response:
    """GET /api/availability?barber=&date=&service="""
    barber = lookup_barber(request.query.get("barber"))
    day = parse_date_param(request.query.get("date"))
    service_param = request.query.get("service")
    duration = lookup_service(service_param).duration_minutes if service_param else None

    availability = await AvailabilityResolver(request.app[DB_KEY]).resolve(
        barber.name, day, duration
    )
    return web.json_response(dump(availability))


async def create_booking(request: Request) -> Response:
    """POST /api/bookings"""
    payload = await read_json(request)

    day = parse_date_param(payload.get("date"))
    window = booking_window()
    if day < window[0] or day > window[-1]:
        raise ValidationError(
            f"Appointments are available up to {settings.booking_window_days} days in advance"
        )

    draft = BookingDraft(
        barber=lookup_barber(payload.get("barber")),
        service=lookup_service(payload.get("service")),
        date=day,
        time=text_field(payload, "time") or None,
        customer=CustomerInfo(
            name=text_field(payload, "name"),
            phone=text_field(payload, "phone"),
            email=text_field(payload, "email"),
        ),
    )

    appointments = await BookingSubmitter(request.app[DB_KEY]).submit(draft)

    return web.json_response(
        {
            "status": "success",
            "booking_id": draft.booking_id,
            "price": appointments[0].price,
            "appointments": [dump(apt) for apt in appointments],
            "receipt_filename": receipt_filename(draft.customer.name, draft.booking_id),
        },
        status=201,
    )


async def booking_receipt(request: Request) -> Response:
    """GET /api/bookings/{id}/receipt"""
    booking_id = request.match_info["id"]
    appointment = await request.app[DB_KEY].get_appointment_by_id(booking_id)
    if appointment is None:
        raise AppointmentNotFoundError(f"Booking {booking_id} not found")

    return pdf_response(
        render_booking_receipt(appointment),
        receipt_filename(appointment.customer_name, booking_id),
    )


# ========== Dashboard routes ==========


async def admin_login(request: Request) -> Response:
    payload = await read_json(request)
    session = request.app[SESSIONS_KEY].login(
        text_field(payload, "username"), text_field(payload, "password", strip=False)
    )
    return web.json_response(
        {
            "status": "success",
            "token": session.token,
            "barber_name": session.barber_name,
            "is_admin": session.is_admin,
            "expires_at": to_iso_string(session.expires_at),
        }
    )


async def admin_logout(request: Request) -> Response:
    request.app[SESSIONS_KEY].logout(bearer_token(request))
    return web.json_response({"status": "success"})


async def admin_list_appointments(request: Request) -> Response:
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    view = get_view(request.query.get("view"))
    appointments = await dashboard.list_appointments(view)
    counts = await dashboard.counts()
    return web.json_response(
        {
            "view": view.value,
            "appointments": [dump(apt) for apt in appointments],
            "counts": counts,
        }
    )


async def admin_update_appointment(request: Request) -> Response:
    """PATCH /api/admin/appointments/{id} with "status" and/or "notes"."""
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    appointment_id = request.match_info["id"]
    payload = await read_json(request)

    if "status" not in payload and "notes" not in payload:
        raise ValidationError("Nothing to update")

    appointment = None
    if "status" in payload:
        appointment = await dashboard.update_status(appointment_id, text_field(payload, "status"))
    if "notes" in payload:
        appointment = await dashboard.update_notes(appointment_id, text_field(payload, "notes"))

    return web.json_response({"status": "success", "appointment": dump(appointment)})


async def admin_delete_appointment(request: Request) -> Response:
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    deleted = await dashboard.delete_appointment(request.match_info["id"])
    return web.json_response({"status": "success", "deleted": deleted})


async def admin_clear_appointments(request: Request) -> Response:
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    deleted = await dashboard.clear_appointments()
    return web.json_response({"status": "success", "deleted": deleted})


async def admin_attach_file(request: Request) -> Response:
    """Multipart form with a "kind" field (receipt/notes) and a "file" field."""
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    form = await request.post()

    upload = form.get("file")
    if upload is None or not hasattr(upload, "file"):
        raise ValidationError("Please choose a file to upload")

    appointment = await dashboard.attach_file(
        request.match_info["id"],
        str(form.get("kind") or ""),
        upload.filename,
        upload.content_type,
        upload.file.read(),
    )
    return web.json_response({"status": "success", "appointment": dump(appointment)})


async def admin_appointment_receipt(request: Request) -> Response:
    dashboard = AdminDashboard(request.app[DB_KEY], admin_session(request))
    appointment_id = request.match_info["id"]
    pdf = await dashboard.booking_details_receipt(appointment_id)
    return pdf_response(pdf, f"booking-details-{appointment_id}.pdf")


async def admin_list_unavailability(request: Request) -> Response:
    manager = UnavailabilityManager(request.app[DB_KEY], admin_session(request))
    grouped = await manager.grouped_by_date(request.query.get("barber"))
    return web.json_response(
        {
            "dates": [
                {"date": day.isoformat(), "records": [dump(r) for r in records]}
                for day, records in grouped.items()
            ]
        }
    )


async def admin_create_unavailability(request: Request) -> Response:
    """POST {date, whole_day, times, reason, barber?}"""
    manager = UnavailabilityManager(request.app[DB_KEY], admin_session(request))
    payload = await read_json(request)
    day = parse_date_param(payload.get("date"))
    reason = text_field(payload, "reason")
    barber = text_field(payload, "barber") or None

    if payload.get("whole_day"):
        records = await manager.mark_whole_day(day, reason, barber_name=barber)
    else:
        times = payload.get("times") or []
        if not isinstance(times, list) or not all(isinstance(t, str) for t in times):
            raise ValidationError("'times' must be a list of time slots")
        records = await manager.mark_time_slots(day, times, reason, barber_name=barber)

    return web.json_response(
        {"status": "success", "records": [dump(r) for r in records]}, status=201
    )


async def admin_delete_unavailability(request: Request) -> Response:
    manager = UnavailabilityManager(request.app[DB_KEY], admin_session(request))
    await manager.remove(request.match_info["id"])
    return web.json_response({"status": "success"})


# ========== Gallery routes ==========


async def developer_login(request: Request) -> Response:
    payload = await read_json(request)
    session = request.app[DEVELOPER_SESSIONS_KEY].login(
        text_field(payload, "password", strip=False)
    )
    return web.json_response(
        {
            "status": "success",
            "token": session.token,
            "expires_at": to_iso_string(session.expires_at),
        }
    )


async def developer_logout(request: Request) -> Response:
    request.app[DEVELOPER_SESSIONS_KEY].logout(bearer_token(request))
    return web.json_response({"status": "success"})


async def list_gallery(request: Request) -> Response:
    images = await GalleryManager(request.app[DB_KEY]).list_images(
        request.query.get("type") or None
    )
    return web.json_response({"images": [dump(img) for img in images]})


async def developer_add_image(request: Request) -> Response:
    require_developer(request)
    payload = await read_json(request)
    image = await GalleryManager(request.app[DB_KEY]).add_image_url(
        text_field(payload, "url"), text_field(payload, "image_type")
    )
    return web.json_response({"status": "success", "image": dump(image)}, status=201)


async def developer_remove_image(request: Request) -> Response:
    require_developer(request)
    await GalleryManager(request.app[DB_KEY]).remove_image(request.match_info["id"])
    return web.json_response({"status": "success"})


async def developer_clear_images(request: Request) -> Response:
    """DELETE /api/developer/gallery?type=about clears one type; no type clears all."""
    require_developer(request)
    gallery = GalleryManager(request.app[DB_KEY])
    image_type = request.query.get("type")
    if image_type:
        deleted = await gallery.clear_type(image_type)
    else:
        deleted = await gallery.clear_all()
    return web.json_response({"status": "success", "deleted": deleted})


def create_app(
    db=None,
    sessions: Optional[SessionStore] = None,
    developer_sessions: Optional[DeveloperSessionStore] = None,
) -> web.Application:
    """
    Create aiohttp application with middleware and routes.

    Args:
        db: Database client (defaults to the shared Supabase client)
        sessions: Dashboard session store
        developer_sessions: Gallery page session store
    """
    app = web.Application(
        middlewares=[security_headers_middleware, error_middleware],
        client_max_size=settings.max_upload_bytes + _UPLOAD_MARGIN_BYTES,
    )
    app[DB_KEY] = db if db is not None else get_db_client()
    app[SESSIONS_KEY] = sessions if sessions is not None else SessionStore()
    app[DEVELOPER_SESSIONS_KEY] = (
        developer_sessions if developer_sessions is not None else DeveloperSessionStore()
    )
    app[STARTED_KEY] = time.time()

    # Public
    app.router.add_get("/health", health_check)
    app.router.add_get("/api/site", site_content)
    app.router.add_get("/api/barbers", list_barbers)
    app.router.add_get("/api/services", list_services)
    app.router.add_get("/api/availability", get_availability)
    app.router.add_post("/api/bookings", create_booking)
    app.router.add_get("/api/bookings/{id}/receipt", booking_receipt)
    app.router.add_get("/api/gallery", list_gallery)

    # Dashboard
    app.router.add_post("/api/admin/login", admin_login)
    app.router.add_post("/api/admin/logout", admin_logout)
    app.router.add_get("/api/admin/appointments", admin_list_appointments)
    app.router.add_delete("/api/admin/appointments", admin_clear_appointments)
    app.router.add_patch("/api/admin/appointments/{id}", admin_update_appointment)
    app.router.add_delete("/api/admin/appointments/{id}", admin_delete_appointment)
    app.router.add_post("/api/admin/appointments/{id}/files", admin_attach_file)
    app.router.add_get("/api/admin/appointments/{id}/receipt", admin_appointment_receipt)
    app.router.add_get("/api/admin/unavailability", admin_list_unavailability)
    app.router.add_post("/api/admin/unavailability", admin_create_unavailability)
    app.router.add_delete("/api/admin/unavailability/{id}", admin_delete_unavailability)

    # Gallery management
    app.router.add_post("/api/developer/login", developer_login)
    app.router.add_post("/api/developer/logout", developer_logout)
    app.router.add_post("/api/developer/gallery", developer_add_image)
    app.router.add_delete("/api/developer/gallery", developer_clear_images)
    app.router.add_delete("/api/developer/gallery/{id}", developer_remove_image)

    return app


if __name__ == "__main__":
    logger.info(f"Starting web server on {settings.host}:{settings.port}")
    web.run_app(create_app(), host=settings.host, port=settings.port)
