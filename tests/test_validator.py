"""Tests for booking rules"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import delete

from tablebook.models import BusinessHours, ReservationPolicy
from tablebook.reservations.results import ErrorKind
from tablebook.reservations.types import CutoffKind, TableId

DENVER = ZoneInfo("America/Denver")


def at(*args) -> datetime:
    return datetime(*args, tzinfo=DENVER)


@pytest.fixture
def validator(service):
    return service.validator


class TestBusinessHours:
    """Opening windows are inclusive at both ends"""

    @pytest.mark.asyncio
    async def test_open_time_is_accepted(self, validator):
        assert await validator.is_within_business_hours(at(2025, 10, 25, 11, 0))

    @pytest.mark.asyncio
    async def test_close_time_is_accepted(self, validator):
        assert await validator.is_within_business_hours(at(2025, 10, 25, 23, 0))

    @pytest.mark.asyncio
    async def test_minute_before_open_is_rejected(self, validator):
        assert not await validator.is_within_business_hours(at(2025, 10, 26, 11, 59))

    @pytest.mark.asyncio
    async def test_minute_after_close_is_rejected(self, validator):
        assert not await validator.is_within_business_hours(at(2025, 10, 23, 22, 1))

    @pytest.mark.asyncio
    async def test_utc_instant_uses_local_weekday(self, validator):
        # Sunday 04:30 UTC is Saturday 22:30 in Denver
        utc_instant = datetime(2025, 10, 26, 4, 30, tzinfo=ZoneInfo("UTC"))
        assert await validator.is_within_business_hours(utc_instant)

    @pytest.mark.asyncio
    async def test_day_without_hours_is_closed(self, validator, test_db):
        await test_db.execute(delete(BusinessHours).where(BusinessHours.day_of_week == 1))
        await test_db.commit()
        validator.policies.invalidate()

        assert not await validator.is_within_business_hours(at(2025, 10, 27, 12, 0))

    @pytest.mark.asyncio
    async def test_day_of_week_out_of_range(self, validator):
        with pytest.raises(ValueError):
            await validator.policies.get_business_hours(8)


class TestPartySize:

    @pytest.mark.asyncio
    async def test_capacity_is_accepted(self, validator):
        assert await validator.is_party_size_valid(TableId(7), 2)

    @pytest.mark.asyncio
    async def test_capacity_plus_one_is_rejected(self, validator):
        assert not await validator.is_party_size_valid(TableId(7), 3)

    @pytest.mark.asyncio
    async def test_empty_party_is_rejected(self, validator):
        assert not await validator.is_party_size_valid(TableId(4), 0)

    @pytest.mark.asyncio
    async def test_unknown_table_is_rejected(self, validator):
        assert not await validator.is_party_size_valid(TableId(99), 1)


class TestFutureAndCutoff:

    def test_now_is_not_in_future(self, validator, clock):
        assert not validator.is_in_future(clock.now())

    def test_next_minute_is_in_future(self, validator, clock):
        assert validator.is_in_future(clock.now() + timedelta(minutes=1))

    @pytest.mark.asyncio
    async def test_exactly_cutoff_away_is_too_late(self, validator, clock):
        instant = clock.now() + timedelta(hours=2)
        assert not await validator.is_within_cutoff(instant, CutoffKind.CANCELLATION)

    @pytest.mark.asyncio
    async def test_beyond_cutoff_is_allowed(self, validator, clock):
        instant = clock.now() + timedelta(hours=2, minutes=1)
        assert await validator.is_within_cutoff(instant, CutoffKind.MODIFICATION)

    @pytest.mark.asyncio
    async def test_missing_policy_disallows(self, validator, test_db, clock):
        await test_db.execute(
            delete(ReservationPolicy).where(ReservationPolicy.policy_type == "cancellation")
        )
        await test_db.commit()
        validator.policies.invalidate()

        instant = clock.now() + timedelta(days=5)
        assert not await validator.is_within_cutoff(instant, CutoffKind.CANCELLATION)
        assert await validator.is_within_cutoff(instant, CutoffKind.MODIFICATION)


class TestCheckOrder:
    """The first failing rule is the one reported"""

    @pytest.mark.asyncio
    async def test_past_time_before_hours(self, validator):
        error = await validator.check_booking(TableId(4), at(2025, 10, 19, 8, 0), 2)
        assert error == ErrorKind.PAST_TIME

    @pytest.mark.asyncio
    async def test_hours_before_capacity(self, validator):
        error = await validator.check_booking(TableId(7), at(2025, 10, 25, 10, 30), 5)
        assert error == ErrorKind.OUTSIDE_HOURS

    @pytest.mark.asyncio
    async def test_unknown_table(self, validator):
        error = await validator.check_booking(TableId(99), at(2025, 10, 25, 19, 30), 2)
        assert error == ErrorKind.UNKNOWN_TABLE

    @pytest.mark.asyncio
    async def test_capacity_before_conflict(self, validator, service, make_draft, customer):
        result = await service.create(make_draft(), customer)
        assert result.ok

        error = await validator.check_booking(TableId(4), at(2025, 10, 25, 19, 30), 5)
        assert error == ErrorKind.CAPACITY_EXCEEDED

    @pytest.mark.asyncio
    async def test_conflict_last(self, validator, service, make_draft, customer):
        result = await service.create(make_draft(), customer)
        assert result.ok

        error = await validator.check_booking(TableId(4), at(2025, 10, 25, 19, 30), 2)
        assert error == ErrorKind.TABLE_CONFLICT

    @pytest.mark.asyncio
    async def test_valid_booking(self, validator):
        assert await validator.check_booking(TableId(4), at(2025, 10, 25, 19, 30), 4) is None
