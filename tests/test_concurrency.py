"""Concurrent bookings of one slot against a file-backed database"""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from tablebook.database import Base
from tablebook.models.reservation import Reservation, ReservationStatus
from tablebook.reservations.context import ReservationContext
from tablebook.reservations.events import RecordingNotifier
from tablebook.reservations.results import ErrorKind
from tablebook.reservations.service import ReservationDraft
from tablebook.reservations.store import ReservationStore, SlotTaken
from tablebook.reservations.types import Actor, CustomerId, Role, TableId

DENVER = ZoneInfo("America/Denver")
SLOT = datetime(2025, 10, 25, 19, 30, tzinfo=DENVER)


@pytest.fixture
def enforce_foreign_keys():
    return False


@pytest.fixture
async def file_sessions(tmp_path, seed, enforce_foreign_keys):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tablebook.db'}")

    if enforce_foreign_keys:
        @event.listens_for(engine.sync_engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed(session)

    yield factory

    await engine.dispose()


def guest_draft(n: int) -> ReservationDraft:
    return ReservationDraft(
        customer_name=f"Guest {n}",
        contact=f"guest{n}@example.com",
        table_id=TableId(4),
        date_time=SLOT,
        party_size=2,
    )


async def book(factory, context: ReservationContext, n: int):
    async with factory() as session:
        result = await context.service(session).create(guest_draft(n), Actor(id=1000 + n, role=Role.CUSTOMER))
        return result.error


@pytest.mark.asyncio
async def test_one_winner_per_slot(file_sessions, clock):
    context = ReservationContext(clock=clock, notifier=RecordingNotifier())

    errors = await asyncio.gather(*(book(file_sessions, context, n) for n in range(8)))

    assert errors.count(None) == 1
    assert all(e == ErrorKind.TABLE_CONFLICT for e in errors if e is not None)
    assert len(context.notifier.events) == 1


@pytest.mark.asyncio
async def test_active_slot_index_rejects_second_insert(file_sessions, clock):
    async with file_sessions() as session:
        store = ReservationStore(session, clock)
        await store.insert(Reservation(
            reference_id="RESFIRST", customer_name="A", contact="a@x",
            table_id=4, date_time=SLOT, party_size=2,
            status=ReservationStatus.CONFIRMED.value,
        ))

        with pytest.raises(SlotTaken):
            await store.insert(Reservation(
                reference_id="RESSECOND", customer_name="B", contact="b@x",
                table_id=4, date_time=SLOT, party_size=2,
                status=ReservationStatus.CONFIRMED.value,
            ))


@pytest.mark.asyncio
async def test_inactive_rows_do_not_hold_the_slot(file_sessions, clock):
    async with file_sessions() as session:
        store = ReservationStore(session, clock)
        first = await store.insert(Reservation(
            reference_id="RESFIRST", customer_name="A", contact="a@x",
            table_id=4, date_time=SLOT, party_size=2,
            status=ReservationStatus.CONFIRMED.value,
        ))
        await store.update_status(first.id, ReservationStatus.CANCELLED)

        second = await store.insert(Reservation(
            reference_id="RESSECOND", customer_name="B", contact="b@x",
            table_id=4, date_time=SLOT, party_size=2,
            status=ReservationStatus.CONFIRMED.value,
        ))

        assert second.id != first.id
        assert await store.count_active_at(TableId(4), SLOT) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("enforce_foreign_keys", [True])
async def test_unknown_customer_is_not_a_table_conflict(file_sessions, clock, make_draft, staff):
    context = ReservationContext(clock=clock, notifier=RecordingNotifier())

    async with file_sessions() as session:
        result = await context.service(session).create(make_draft(customer_id=CustomerId(999)), staff)
        held = await ReservationStore(session, clock).count_active_at(TableId(4), SLOT)

    assert result.error == ErrorKind.INTERNAL
    assert held == 0
    assert context.notifier.events == []


@pytest.mark.asyncio
@pytest.mark.parametrize("enforce_foreign_keys", [True])
async def test_foreign_key_failures_propagate_from_writes(file_sessions, clock):
    async with file_sessions() as session:
        store = ReservationStore(session, clock)

        with pytest.raises(IntegrityError):
            await store.insert(Reservation(
                reference_id="RESORPHAN", customer_id=999, customer_name="A", contact="a@x",
                table_id=4, date_time=SLOT, party_size=2,
                status=ReservationStatus.CONFIRMED.value,
            ))

        booked = await store.insert(Reservation(
            reference_id="RESFIRST", customer_name="A", contact="a@x",
            table_id=4, date_time=SLOT, party_size=2,
            status=ReservationStatus.CONFIRMED.value,
        ))
        with pytest.raises(IntegrityError):
            await store.reassign(booked.id, TableId(99), SLOT)

        assert (await store.get_by_id(booked.id)).table_id == 4
