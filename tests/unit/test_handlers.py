"""
Unit tests for bot handlers.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import CallbackQuery, Message, User

from booking.flow import BookingFlow, BookingStep
from bot import handlers
from bot.states import BookingStates
from models.appointment import Appointment
from utils.datetime_utils import shop_today


@pytest.fixture
def state():
    """Real FSM context on in-memory storage."""
    return FSMContext(
        storage=MemoryStorage(),
        key=StorageKey(bot_id=1, chat_id=123456789, user_id=123456789),
    )


@pytest.fixture(autouse=True)
def patched_db(mock_db):
    with patch("bot.handlers.get_db_client", return_value=mock_db):
        yield mock_db


def make_callback(data: str):
    """Create mock callback query."""
    user = User(id=123456789, is_bot=False, first_name="Test")
    callback = MagicMock(spec=CallbackQuery)
    callback.from_user = user
    callback.data = data
    callback.message = MagicMock()
    callback.message.edit_text = AsyncMock()
    callback.message.answer_document = AsyncMock()
    callback.answer = AsyncMock()
    return callback


def make_message(text: str):
    """Create mock message."""
    message = MagicMock(spec=Message)
    message.text = text
    message.answer = AsyncMock()
    return message


async def current_flow(state, mock_db) -> BookingFlow:
    data = await state.get_data()
    return BookingFlow.from_state(mock_db, data.get(handlers.FLOW_KEY))


class TestBookingWizard:
    """Test the booking wizard handlers."""

    @pytest.mark.asyncio
    async def test_start_booking_shows_barbers(self, state):
        callback = make_callback("book_appointment")

        await handlers.start_booking(callback, state)

        assert await state.get_state() == BookingStates.selecting_barber.state
        text = callback.message.edit_text.await_args.args[0]
        assert "Select Barber" in text

    @pytest.mark.asyncio
    async def test_select_barber_then_service(self, state, patched_db):
        await handlers.start_booking(make_callback("book_appointment"), state)
        await handlers.select_barber(make_callback("barber_2"), state)

        assert await state.get_state() == BookingStates.selecting_service.state

        await handlers.select_service(make_callback("service_1"), state)

        flow = await current_flow(state, patched_db)
        assert flow.step == BookingStep.DATE_TIME
        assert flow.draft.barber.name == "Pao"
        assert flow.draft.service.name == "Sharp & Styled"

    @pytest.mark.asyncio
    async def test_perm_group_opens_options(self, state):
        await handlers.start_booking(make_callback("book_appointment"), state)
        await handlers.select_barber(make_callback("barber_1"), state)
        callback = make_callback("service_3")

        await handlers.select_service(callback, state)

        assert "Choose a perm" in callback.message.edit_text.await_args.args[0]
        assert await state.get_state() == BookingStates.selecting_service.state

    @pytest.mark.asyncio
    async def test_unknown_barber_alerts(self, state):
        callback = make_callback("barber_99")

        await handlers.select_barber(callback, state)

        callback.answer.assert_awaited_once()
        assert callback.answer.await_args.kwargs["show_alert"] is True

    @pytest.mark.asyncio
    async def test_full_booking(self, state, patched_db):
        async def create(record):
            return Appointment(id="abcdef12-0000", **record.model_dump())

        patched_db.create_appointment.side_effect = create
        day = shop_today() + timedelta(days=2)

        await handlers.start_booking(make_callback("book_appointment"), state)
        await handlers.select_barber(make_callback("barber_1"), state)
        await handlers.select_service(make_callback("service_1"), state)
        await handlers.select_date(make_callback(f"date_{day.isoformat()}"), state)
        await handlers.select_time(make_callback("time_9:00 AM"), state)

        assert await state.get_state() == BookingStates.entering_name.state

        await handlers.enter_name(make_message("Juan Dela Cruz"), state)
        await handlers.enter_phone(make_message("09123456789"), state)
        await handlers.skip_email(make_callback("skip_email"), state)

        assert await state.get_state() == BookingStates.confirming_booking.state

        callback = make_callback("confirm_booking")
        await handlers.confirm_booking(callback, state)

        text = callback.message.edit_text.await_args.args[0]
        assert "Booking Confirmed" in text
        assert "ABCDEF12" in text
        document = callback.message.answer_document.await_args.args[0]
        assert document.filename == "booking-confirmation-Juan-Dela-Cruz-abcdef12-0000.pdf"
        assert await state.get_state() is None

    @pytest.mark.asyncio
    async def test_invalid_phone_reprompts(self, state):
        await state.set_state(BookingStates.entering_phone)
        message = make_message("not a number")

        await handlers.enter_phone(message, state)

        message.answer.assert_awaited_once_with("Please enter a valid contact number.")
        assert await state.get_state() == BookingStates.entering_phone.state

    @pytest.mark.asyncio
    async def test_cancel_clears_state(self, state):
        await handlers.start_booking(make_callback("book_appointment"), state)
        await handlers.select_barber(make_callback("barber_1"), state)

        await handlers.cancel_booking(make_callback("cancel_booking"), state)

        assert await state.get_state() is None
        assert await state.get_data() == {}

    @pytest.mark.asyncio
    async def test_back_returns_to_previous_step(self, state, patched_db):
        await handlers.start_booking(make_callback("book_appointment"), state)
        await handlers.select_barber(make_callback("barber_1"), state)

        await handlers.step_back(make_callback("step_back"), state)

        flow = await current_flow(state, patched_db)
        assert flow.step == BookingStep.BARBER
        assert await state.get_state() == BookingStates.selecting_barber.state


def test_format_summary_includes_fee():
    flow = BookingFlow(MagicMock())
    flow.select_barber("1")
    flow.select_service("3a")

    summary = handlers.format_summary(flow.draft)

    assert "Barber: Kean" in summary
    assert "₱850 + ₱20 priority fee = ₱870" in summary
