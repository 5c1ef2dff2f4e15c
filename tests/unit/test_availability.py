"""
Unit tests for slot availability resolution.
"""

from datetime import date, datetime

import pytest

from booking.availability import (
    AvailabilityResolver,
    consecutive_blocks_conflict,
    no_duration_conflict,
)
from booking.slots import TIME_SLOTS
from models.unavailability import UnavailabilitySlot
from utils.exceptions import DatabaseError

DAY = date(2030, 1, 15)
# The evening before, so no slot of DAY has passed
BEFORE = datetime(2030, 1, 14, 20, 0)


def unavailable(time=None, whole_day=False, barber="Kean"):
    return UnavailabilitySlot(
        id="u1", barber_name=barber, date=DAY, time=time, is_whole_day=whole_day
    )


class TestAvailabilityResolver:
    """Test AvailabilityResolver.resolve."""

    @pytest.mark.asyncio
    async def test_free_day_returns_every_slot(self, mock_db):
        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=BEFORE)

        assert result.available == TIME_SLOTS
        assert result.booked == []
        mock_db.get_appointments_by_barber.assert_awaited_once_with("Kean", DAY)
        mock_db.get_unavailability_for_date.assert_awaited_once_with("Kean", DAY)

    @pytest.mark.asyncio
    async def test_booked_time_excluded(self, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=DAY, time="10:00 AM")
        ]

        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=BEFORE)

        assert "10:00 AM" not in result.available
        assert "9:40 AM" in result.available
        assert "10:20 AM" in result.available
        assert result.booked == ["10:00 AM"]
        assert len(result.available) == 36

    @pytest.mark.asyncio
    async def test_cancelled_appointment_frees_slot(self, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=DAY, time="10:00 AM", status="cancelled")
        ]

        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=BEFORE)

        assert "10:00 AM" in result.available

    @pytest.mark.asyncio
    async def test_specific_unavailability_excluded(self, mock_db):
        mock_db.get_unavailability_for_date.return_value = [unavailable("1:00 PM")]

        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=BEFORE)

        assert "1:00 PM" not in result.available
        assert result.unavailable == ["1:00 PM"]

    @pytest.mark.asyncio
    async def test_whole_day_blocks_everything(self, mock_db):
        mock_db.get_unavailability_for_date.return_value = [
            unavailable("1:00 PM"),
            unavailable(whole_day=True, barber="Pao"),
        ]

        result = await AvailabilityResolver(mock_db).resolve("Pao", DAY, now=BEFORE)

        assert result.available == []
        assert result.whole_day_unavailable is True

    @pytest.mark.asyncio
    async def test_past_slots_today_excluded(self, mock_db):
        now = datetime(2030, 1, 15, 12, 10)

        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=now)

        assert result.available[0] == "12:20 PM"
        assert "12:00 PM" in result.past

    @pytest.mark.asyncio
    async def test_strict_policy_skips_overlapping_starts(self, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=DAY, time="11:00 AM")
        ]
        resolver = AvailabilityResolver(mock_db, duration_policy=consecutive_blocks_conflict)

        result = await resolver.resolve("Kean", DAY, duration_minutes=120, now=BEFORE)

        # 9:00 ends at 10:40; 9:20 would need 11:00
        assert "9:00 AM" in result.available
        assert "9:20 AM" not in result.available
        assert "10:40 AM" not in result.available
        assert "11:20 AM" in result.available

    @pytest.mark.asyncio
    async def test_strict_policy_uses_resolver_grid(self, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=DAY, time="10:00 AM")
        ]
        hourly = ["9:00 AM", "10:00 AM", "11:00 AM"]
        resolver = AvailabilityResolver(
            mock_db, duration_policy=consecutive_blocks_conflict, slots=hourly
        )

        result = await resolver.resolve("Kean", DAY, duration_minutes=40, now=BEFORE)

        # On the hourly grid the second block of 9:00 is 10:00
        assert result.available == ["11:00 AM"]

    def test_conflict_policy_accepts_grid(self):
        hourly = ["9:00 AM", "10:00 AM", "11:00 AM"]

        assert consecutive_blocks_conflict("9:00 AM", 40, {"10:00 AM"}, hourly)
        assert not consecutive_blocks_conflict("9:00 AM", 40, {"10:00 AM"})

    @pytest.mark.asyncio
    async def test_lenient_policy_ignores_duration(self, mock_db, make_appointment):
        mock_db.get_appointments_by_barber.return_value = [
            make_appointment(date=DAY, time="11:00 AM")
        ]
        resolver = AvailabilityResolver(mock_db, duration_policy=no_duration_conflict)

        result = await resolver.resolve("Kean", DAY, duration_minutes=120, now=BEFORE)

        assert "10:40 AM" in result.available
        assert "11:00 AM" not in result.available

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_open(self, mock_db):
        mock_db.get_appointments_by_barber.side_effect = DatabaseError("down")
        mock_db.get_unavailability_for_date.side_effect = DatabaseError("down")

        result = await AvailabilityResolver(mock_db).resolve("Kean", DAY, now=BEFORE)

        assert result.available == TIME_SLOTS

    def test_default_policy_follows_settings(self, mock_db, mock_settings):
        assert AvailabilityResolver(mock_db).duration_policy is consecutive_blocks_conflict

        mock_settings.strict_duration_check = False
        assert AvailabilityResolver(mock_db).duration_policy is no_duration_conflict
