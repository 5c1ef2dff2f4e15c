"""
Bot handlers for the barbershop booking wizard.
Walks the customer through barber, service, date & time, contact details and
confirmation, then sends the confirmation receipt as a PDF.
"""

import logging
from typing import Union

from aiogram import Router
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import BufferedInputFile, CallbackQuery, InlineKeyboardMarkup, Message

from booking.flow import BookingFlow, BookingStep, booking_window
from booking.receipts import receipt_filename, render_booking_receipt
from bot.keyboards import (
    get_back_to_menu_keyboard,
    get_barbers_keyboard,
    get_confirm_booking_keyboard,
    get_customer_info_keyboard,
    get_dates_keyboard,
    get_main_menu_keyboard,
    get_perm_options_keyboard,
    get_services_keyboard,
    get_skip_email_keyboard,
    get_times_keyboard,
)
from bot.states import BookingStates
from config import settings
from db import get_db_client
from models.barber import get_all_barbers
from models.booking import BookingDraft
from models.service import KOREAN_PERMS, SERVICES
from utils.constants import BOOKING_ID_DISPLAY_LENGTH, SHOP_HOURS, SHOP_NAME
from utils.datetime_utils import format_long_date, parse_iso_date
from utils.exceptions import DatabaseError, SlotNotAvailableError, ValidationError
from utils.validation import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = Router()

FLOW_KEY = "flow"
WELCOME_TEXT = f"💈 Welcome to {SHOP_NAME}!\n\nChoose an option:"

Target = Union[Message, CallbackQuery]


async def load_flow(state: FSMContext) -> BookingFlow:
    data = await state.get_data()
    return BookingFlow.from_state(get_db_client(), data.get(FLOW_KEY))


async def save_flow(state: FSMContext, flow: BookingFlow) -> None:
    await state.update_data(**{FLOW_KEY: flow.to_state()})


async def reply(target: Target, text: str, markup: InlineKeyboardMarkup) -> None:
    """Edit the wizard message for button presses, answer typed messages."""
    if isinstance(target, CallbackQuery):
        await target.message.edit_text(text, reply_markup=markup)
    else:
        await target.answer(text, reply_markup=markup)


def step_header(step: BookingStep) -> str:
    return f"Step {int(step) + 1} of 5: {step.title}"


def format_summary(draft: BookingDraft) -> str:
    """Booking details as shown on the confirmation and success screens."""
    lines = []
    if draft.barber:
        lines.append(f"Barber: {draft.barber.name}")
    if draft.service:
        lines.append(
            f"Service: {draft.service.name} ({draft.service.duration_minutes} min)"
        )
    if draft.date:
        lines.append(f"Date: {format_long_date(draft.date)}")
    if draft.time:
        lines.append(f"Time: {draft.time}")
    if draft.customer.name:
        lines.append(f"Name: {draft.customer.name}")
    if draft.customer.phone:
        lines.append(f"Contact: {draft.customer.phone}")
    if draft.customer.email:
        lines.append(f"Email: {draft.customer.email}")
    if draft.service:
        fee = settings.priority_fee
        lines.append(
            f"Price: ₱{draft.service.price} + ₱{fee} priority fee = "
            f"₱{draft.service.price + fee}"
        )
    return "\n".join(lines)


async def show_step(target: Target, state: FSMContext, flow: BookingFlow) -> None:
    """Render the flow's current step and move the FSM to match."""
    step = flow.step
    draft = flow.draft

    if step == BookingStep.BARBER:
        await state.set_state(BookingStates.selecting_barber)
        await reply(target, f"📅 {step_header(step)}\n\nWho should cut your hair?", get_barbers_keyboard())

    elif step == BookingStep.SERVICE:
        await state.set_state(BookingStates.selecting_service)
        await reply(
            target,
            f"💈 {step_header(step)}\n\nBarber: {draft.barber.name}\n\nSelect a service:",
            get_services_keyboard(),
        )

    elif step == BookingStep.DATE_TIME:
        await state.set_state(BookingStates.selecting_date_time)
        if draft.date is None:
            await reply(
                target,
                f"📅 {step_header(step)}\n\nPick a day (up to "
                f"{settings.booking_window_days} days ahead):",
                get_dates_keyboard(booking_window()),
            )
        else:
            availability = await flow.available_times()
            if availability.whole_day_unavailable:
                note = f"{draft.barber.name} is not available on this day."
            elif not availability.available:
                note = "No available times on this day."
            else:
                note = "Select a time:"
            await reply(
                target,
                f"🕒 {step_header(step)}\n\n{draft.barber.name} on "
                f"{format_long_date(draft.date)}\n\n{note}",
                get_times_keyboard(availability.available),
            )

    elif step == BookingStep.CUSTOMER_INFO:
        await state.set_state(BookingStates.entering_name)
        await reply(
            target,
            f"📝 {step_header(step)}\n\nPlease type your full name:",
            get_customer_info_keyboard(),
        )

    elif step == BookingStep.CONFIRMATION:
        await state.set_state(BookingStates.confirming_booking)
        await reply(
            target,
            f"📋 {step_header(step)}\n\n{format_summary(draft)}\n\n"
            f"Please review your booking.",
            get_confirm_booking_keyboard(),
        )

    await save_flow(state, flow)


# ========== Start Command & Main Menu ==========


@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext):
    """Handle /start command."""
    await state.clear()
    await message.answer(WELCOME_TEXT, reply_markup=get_main_menu_keyboard())


@router.callback_query(lambda c: c.data == "main_menu")
async def show_main_menu(callback: CallbackQuery, state: FSMContext):
    """Show main menu."""
    await state.clear()
    await callback.message.edit_text(WELCOME_TEXT, reply_markup=get_main_menu_keyboard())
    await callback.answer()


@router.callback_query(lambda c: c.data == "cancel_booking")
async def cancel_booking(callback: CallbackQuery, state: FSMContext):
    """Close the wizard and drop the draft."""
    flow = await load_flow(state)
    flow.close()
    await state.clear()
    await callback.message.edit_text(
        "❌ Booking cancelled.\n\n" + WELCOME_TEXT,
        reply_markup=get_main_menu_keyboard(),
    )
    await callback.answer()


# ========== Booking Flow ==========


@router.callback_query(lambda c: c.data == "book_appointment")
async def start_booking(callback: CallbackQuery, state: FSMContext):
    """Start booking flow."""
    await state.clear()
    flow = BookingFlow(get_db_client())
    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data == "step_back")
async def step_back(callback: CallbackQuery, state: FSMContext):
    flow = await load_flow(state)
    flow.back()
    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data.startswith("barber_"))
async def select_barber(callback: CallbackQuery, state: FSMContext):
    """Handle barber selection."""
    flow = await load_flow(state)
    try:
        flow.select_barber(callback.data.split("_", 1)[1])
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data == "show_services")
async def show_services(callback: CallbackQuery, state: FSMContext):
    flow = await load_flow(state)
    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data.startswith("service_"))
async def select_service(callback: CallbackQuery, state: FSMContext):
    """Handle service selection."""
    service_id = callback.data.split("_", 1)[1]

    if service_id == KOREAN_PERMS.id:
        await callback.message.edit_text(
            f"💈 {KOREAN_PERMS.name}\n\n{KOREAN_PERMS.description}\n\nChoose a perm:",
            reply_markup=get_perm_options_keyboard(),
        )
        await callback.answer()
        return

    flow = await load_flow(state)
    try:
        flow.select_service(service_id)
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data.startswith("date_"))
async def select_date(callback: CallbackQuery, state: FSMContext):
    """Handle date selection; shows the times for that day."""
    flow = await load_flow(state)
    try:
        flow.select_date(parse_iso_date(callback.data.split("_", 1)[1]))
    except ValueError:
        await callback.answer("Invalid date", show_alert=True)
        return
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data == "change_date")
async def change_date(callback: CallbackQuery, state: FSMContext):
    flow = await load_flow(state)
    flow.draft.date = None
    flow.draft.time = None
    await show_step(callback, state, flow)
    await callback.answer()


@router.callback_query(lambda c: c.data == "refresh_times")
async def refresh_times(callback: CallbackQuery, state: FSMContext):
    flow = await load_flow(state)
    await show_step(callback, state, flow)
    await callback.answer("Times refreshed")


@router.callback_query(lambda c: c.data.startswith("time_"))
async def select_time(callback: CallbackQuery, state: FSMContext):
    """Handle time selection."""
    flow = await load_flow(state)
    try:
        await flow.select_time(callback.data.split("_", 1)[1])
        flow.advance()
    except (ValidationError, SlotNotAvailableError) as e:
        await callback.answer(str(e), show_alert=True)
        await show_step(callback, state, flow)
        return

    await show_step(callback, state, flow)
    await callback.answer()


# ========== Customer Info ==========


@router.message(StateFilter(BookingStates.entering_name))
async def enter_name(message: Message, state: FSMContext):
    name = (message.text or "").strip()
    if not name:
        await message.answer("Please type your full name.")
        return

    await state.update_data(customer_name=name)
    await state.set_state(BookingStates.entering_phone)
    await message.answer(
        "📞 Please type your contact number:",
        reply_markup=get_customer_info_keyboard(),
    )


@router.message(StateFilter(BookingStates.entering_phone))
async def enter_phone(message: Message, state: FSMContext):
    phone = (message.text or "").strip()
    if not validate_phone(phone):
        await message.answer("Please enter a valid contact number.")
        return

    await state.update_data(customer_phone=phone)
    await state.set_state(BookingStates.entering_email)
    await message.answer(
        "✉️ Please type your email address, or skip:",
        reply_markup=get_skip_email_keyboard(),
    )


async def finish_customer_info(target: Target, state: FSMContext, email: str) -> None:
    data = await state.get_data()
    flow = await load_flow(state)
    try:
        flow.set_customer_info(
            data.get("customer_name", ""), data.get("customer_phone", ""), email
        )
        flow.advance()
    except ValidationError as e:
        if isinstance(target, CallbackQuery):
            await target.answer(str(e), show_alert=True)
        else:
            await target.answer(str(e))
        return

    await show_step(target, state, flow)


@router.message(StateFilter(BookingStates.entering_email))
async def enter_email(message: Message, state: FSMContext):
    email = (message.text or "").strip()
    if not validate_email(email):
        await message.answer("Please enter a valid email address.")
        return
    await finish_customer_info(message, state, email)


@router.callback_query(lambda c: c.data == "skip_email", StateFilter(BookingStates.entering_email))
async def skip_email(callback: CallbackQuery, state: FSMContext):
    await finish_customer_info(callback, state, "")
    await callback.answer()


# ========== Confirmation ==========


@router.callback_query(lambda c: c.data == "confirm_booking", StateFilter(BookingStates.confirming_booking))
async def confirm_booking(callback: CallbackQuery, state: FSMContext):
    """Save the booking and send the receipt."""
    flow = await load_flow(state)

    try:
        await flow.confirm()
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return
    except SlotNotAvailableError:
        await callback.answer(
            "Sorry, that time was just taken. Please pick another time.",
            show_alert=True,
        )
        flow.draft.time = None
        flow.step = BookingStep.DATE_TIME
        await show_step(callback, state, flow)
        return
    except DatabaseError as e:
        logger.error(f"Failed to create booking: {e}", exc_info=True)
        await callback.answer(
            "Failed to create booking. Please try again.", show_alert=True
        )
        return

    completed = flow.completed
    await state.clear()

    short_id = (completed.booking_id or "")[:BOOKING_ID_DISPLAY_LENGTH].upper()
    await callback.message.edit_text(
        f"✅ Booking Confirmed!\n\nBooking ID: {short_id}\n"
        f"{format_summary(completed)}\n\n"
        "Please arrive 10 minutes before your appointment time.",
        reply_markup=get_back_to_menu_keyboard(),
    )

    try:
        pdf = render_booking_receipt(completed)
        await callback.message.answer_document(
            BufferedInputFile(
                pdf,
                filename=receipt_filename(completed.customer.name, completed.booking_id or ""),
            ),
            caption="📄 Your booking confirmation",
        )
    except Exception as e:
        logger.error(f"Failed to send receipt for {completed.booking_id}: {e}", exc_info=True)

    await callback.answer()


# ========== Info ==========


@router.callback_query(lambda c: c.data == "services_info")
async def show_services_info(callback: CallbackQuery):
    lines = [f"• {s.name} ({s.description}) - ₱{s.price}" for s in SERVICES]
    lines.append(f"• {KOREAN_PERMS.name} ({KOREAN_PERMS.description}) - {KOREAN_PERMS.price_range}")
    await callback.message.edit_text(
        "💈 Services\n\n" + "\n".join(lines) +
        f"\n\nOnline bookings include a ₱{settings.priority_fee} priority fee.",
        reply_markup=get_back_to_menu_keyboard(),
    )
    await callback.answer()


@router.callback_query(lambda c: c.data == "about")
async def show_about(callback: CallbackQuery):
    """Show about information."""
    barbers = "\n".join(
        f"• {b.name} - {b.expertise}" for b in get_all_barbers()
    )
    await callback.message.edit_text(
        f"ℹ️ About {SHOP_NAME}\n\n"
        f"Our barbers:\n{barbers}\n\n"
        f"Open {SHOP_HOURS}\n\n"
        "Book your appointment now! 👇",
        reply_markup=get_back_to_menu_keyboard(),
    )
    await callback.answer()


def register_handlers(dp) -> None:
    """Register all handlers with dispatcher."""
    dp.include_router(router)
