"""
Inline keyboards for the booking wizard.
"""

from datetime import date
from typing import List

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from config import settings
from models.barber import get_all_barbers
from models.service import KOREAN_PERMS, SERVICES
from utils.datetime_utils import to_iso_date


def get_main_menu_keyboard() -> InlineKeyboardMarkup:
    """Get main menu keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="📅 Book Appointment", callback_data="book_appointment")
    )
    builder.row(
        InlineKeyboardButton(text="💈 Services", callback_data="services_info")
    )
    builder.row(
        InlineKeyboardButton(text="ℹ️ About", callback_data="about")
    )

    return builder.as_markup()


def get_barbers_keyboard() -> InlineKeyboardMarkup:
    """Get barber selection keyboard."""
    builder = InlineKeyboardBuilder()

    for barber in get_all_barbers():
        builder.row(
            InlineKeyboardButton(
                text=f"{barber.name} - {barber.experience}",
                callback_data=f"barber_{barber.id}",
            )
        )

    builder.row(InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_booking"))

    return builder.as_markup()


def get_services_keyboard() -> InlineKeyboardMarkup:
    """Get services selection keyboard. Korean Perms opens its own options."""
    builder = InlineKeyboardBuilder()

    for service in SERVICES:
        builder.row(
            InlineKeyboardButton(
                text=f"{service.name} - ₱{service.price}",
                callback_data=f"service_{service.id}",
            )
        )
    builder.row(
        InlineKeyboardButton(
            text=f"{KOREAN_PERMS.name} - {KOREAN_PERMS.price_range}",
            callback_data=f"service_{KOREAN_PERMS.id}",
        )
    )

    add_step_navigation(builder)
    return builder.as_markup()


def get_perm_options_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()

    for option in KOREAN_PERMS.options:
        label = option.name.split("–", 1)[-1].strip()
        builder.row(
            InlineKeyboardButton(
                text=f"{label} - ₱{option.price}",
                callback_data=f"service_{option.id}",
            )
        )

    builder.row(InlineKeyboardButton(text="🔙 Back", callback_data="show_services"))

    return builder.as_markup()


def get_dates_keyboard(days: List[date]) -> InlineKeyboardMarkup:
    """Get date selection keyboard, two days per row."""
    builder = InlineKeyboardBuilder()

    for day in days:
        builder.button(
            text=day.strftime("%a %b %d"),
            callback_data=f"date_{to_iso_date(day)}",
        )
    builder.adjust(2)

    add_step_navigation(builder)
    return builder.as_markup()


def get_times_keyboard(times: List[str]) -> InlineKeyboardMarkup:
    """Get time slot keyboard, three slots per row."""
    builder = InlineKeyboardBuilder()

    for label in times:
        builder.button(text=label, callback_data=f"time_{label}")
    builder.adjust(3)

    builder.row(
        InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh_times"),
        InlineKeyboardButton(text="📅 Other Date", callback_data="change_date"),
    )
    add_step_navigation(builder)
    return builder.as_markup()


def get_customer_info_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    add_step_navigation(builder)
    return builder.as_markup()


def get_skip_email_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="⏭ Skip", callback_data="skip_email"))
    add_step_navigation(builder)

    return builder.as_markup()


def get_confirm_booking_keyboard() -> InlineKeyboardMarkup:
    """Get booking confirmation keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(
            text=f"✅ Confirm Booking (+₱{settings.priority_fee} priority fee)",
            callback_data="confirm_booking",
        )
    )
    add_step_navigation(builder)

    return builder.as_markup()


def get_back_to_menu_keyboard() -> InlineKeyboardMarkup:
    """Get simple back to menu keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="🔙 Main Menu", callback_data="main_menu"))

    return builder.as_markup()


def add_step_navigation(builder: InlineKeyboardBuilder) -> None:
    builder.row(
        InlineKeyboardButton(text="⬅️ Back", callback_data="step_back"),
        InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_booking"),
    )
