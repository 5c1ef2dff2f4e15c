"""
Booking confirmation receipts.
Renders a one-page PDF the customer can download after booking.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import settings
from models.appointment import Appointment
from models.booking import BookingDraft
from models.service import get_service_by_name
from utils.constants import BOOKING_ID_DISPLAY_LENGTH, RECEIPT_REMINDERS, SHOP_NAME
from utils.datetime_utils import format_long_date, shop_now

logger = logging.getLogger(__name__)


@dataclass
class ReceiptData:
    """Everything printed on a confirmation receipt."""

    booking_id: str
    customer_name: str
    customer_phone: str
    customer_email: str
    barber_name: str
    service_name: str
    date: Optional[date]
    time: str
    duration_minutes: Optional[int]
    price: int


def receipt_from_draft(draft: BookingDraft) -> ReceiptData:
    """Receipt for a just-submitted booking; price includes the priority fee."""
    service = draft.service
    return ReceiptData(
        booking_id=draft.booking_id or "",
        customer_name=draft.customer.name,
        customer_phone=draft.customer.phone,
        customer_email=draft.customer.email,
        barber_name=draft.barber.name if draft.barber else "",
        service_name=service.name if service else "",
        date=draft.date,
        time=draft.time or "",
        duration_minutes=service.duration_minutes if service else None,
        price=(service.price + settings.priority_fee) if service else 0,
    )


def receipt_from_appointment(appointment: Appointment) -> ReceiptData:
    """Receipt for a stored appointment (the first block of its booking)."""
    service = get_service_by_name(appointment.base_service)
    return ReceiptData(
        booking_id=appointment.id or "",
        customer_name=appointment.customer_name,
        customer_phone=appointment.customer_phone,
        customer_email=appointment.customer_email,
        barber_name=appointment.barber_name,
        service_name=appointment.base_service,
        date=appointment.date,
        time=appointment.time,
        duration_minutes=service.duration_minutes if service else None,
        price=appointment.price,
    )


def receipt_filename(customer_name: str, booking_id: str) -> str:
    name = "-".join(customer_name.split()) or "customer"
    return f"booking-confirmation-{name}-{booking_id}.pdf"


def render_booking_receipt(receipt) -> bytes:
    """
    Render a confirmation receipt as PDF.

    Args:
        receipt: ReceiptData, BookingDraft or Appointment

    Returns:
        PDF document bytes
    """
    if isinstance(receipt, BookingDraft):
        receipt = receipt_from_draft(receipt)
    elif isinstance(receipt, Appointment):
        receipt = receipt_from_appointment(receipt)

    logger.info(f"Rendering receipt for booking {receipt.booking_id}")

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=f"Booking Confirmation - {receipt.customer_name}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReceiptTitle",
        parent=styles["Heading1"],
        fontSize=22,
        textColor=colors.HexColor("#1e293b"),
        spaceAfter=6,
    )
    muted_style = ParagraphStyle(
        "ReceiptMuted",
        parent=styles["Normal"],
        fontSize=9,
        textColor=colors.HexColor("#64748b"),
    )

    short_id = receipt.booking_id[:BOOKING_ID_DISPLAY_LENGTH].upper() or "N/A"
    duration = f"{receipt.duration_minutes} minutes" if receipt.duration_minutes else "N/A"

    rows = [
        ["Booking ID", short_id],
        ["Name", receipt.customer_name],
        ["Contact", receipt.customer_phone],
        ["Email", receipt.customer_email or "N/A"],
        ["Date", format_long_date(receipt.date)],
        ["Time", receipt.time or "N/A"],
        ["Barber", receipt.barber_name],
        ["Service", receipt.service_name],
        ["Duration", duration],
        ["Price", f"PHP {receipt.price}"],
    ]
    table = Table(
        [[Paragraph(escape(k), styles["Normal"]), Paragraph(escape(v), styles["Normal"])] for k, v in rows],
        colWidths=[1.6 * inch, 4.5 * inch],
    )
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f1f5f9")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cbd5e1")),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )

    story = [
        Paragraph(escape(SHOP_NAME), title_style),
        Paragraph("Booking Confirmation", styles["Heading2"]),
        Spacer(1, 0.2 * inch),
        table,
        Spacer(1, 0.3 * inch),
        Paragraph("Reminders", styles["Heading3"]),
    ]
    story.extend(Paragraph(f"- {escape(line)}", styles["Normal"]) for line in RECEIPT_REMINDERS)
    story.append(Spacer(1, 0.3 * inch))
    story.append(
        Paragraph(f"Generated {shop_now().strftime('%B %d, %Y %I:%M %p')}", muted_style)
    )

    doc.build(story)
    return buffer.getvalue()
