"""
FSM (Finite State Machine) states for bot conversation flow.
"""

from aiogram.fsm.state import State, StatesGroup


class BookingStates(StatesGroup):
    """States for booking flow."""

    selecting_barber = State()
    selecting_service = State()
    selecting_date_time = State()
    entering_name = State()
    entering_phone = State()
    entering_email = State()
    confirming_booking = State()
