"""Test configuration and fixtures"""

from datetime import datetime, time
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tablebook.main import app
from tablebook.database import Base, get_db
from tablebook.api.auth import create_access_token
from tablebook.models import BusinessHours, Customer, DiningTable, ReservationPolicy
from tablebook.reservations.clock import FixedClock
from tablebook.reservations.context import ReservationContext
from tablebook.reservations.events import RecordingNotifier
from tablebook.reservations.service import ReservationDraft
from tablebook.reservations.types import Actor, CustomerId, Role, TableId


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DENVER = ZoneInfo("America/Denver")

# Monday noon
NOW = datetime(2025, 10, 20, 12, 0, tzinfo=DENVER)

# Saturday evening, inside Fri/Sat hours
SATURDAY_EVENING = datetime(2025, 10, 25, 19, 30, tzinfo=DENVER)

HOURS = {
    1: (time(11, 0), time(22, 0)),
    2: (time(11, 0), time(22, 0)),
    3: (time(11, 0), time(22, 0)),
    4: (time(11, 0), time(22, 0)),
    5: (time(11, 0), time(23, 0)),
    6: (time(11, 0), time(23, 0)),
    7: (time(12, 0), time(21, 0)),
}


def local(*args) -> datetime:
    """Aware datetime in the restaurant's zone"""
    return datetime(*args, tzinfo=DENVER)


async def seed_restaurant(session: AsyncSession) -> None:
    """Tables 4 and 7, weekly hours, 2h cutoffs and two customers"""
    session.add_all([
        DiningTable(
            id=4, table_number="4", capacity=4, zone="Main",
            base_price=Decimal("25.00"), surcharge=Decimal("0.00"),
        ),
        DiningTable(
            id=7, table_number="7", capacity=2, zone="Patio",
            base_price=Decimal("30.00"), surcharge=Decimal("10.00"),
        ),
    ])
    for day, (open_time, close_time) in HOURS.items():
        session.add(BusinessHours(day_of_week=day, open_time=open_time, close_time=close_time))
    session.add_all([
        ReservationPolicy(policy_type="cancellation", hours_before=2),
        ReservationPolicy(policy_type="modification", hours_before=2),
    ])
    session.add_all([
        Customer(id=42, name="Alice", email="alice@example.com"),
        Customer(id=43, name="Bob", email="bob@example.com", phone="+15055550100"),
    ])
    await session.commit()


@pytest.fixture
async def engine():
    """In-memory database shared by every session of a test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    """Session over a seeded restaurant"""
    async with session_factory() as session:
        await seed_restaurant(session)

    async with session_factory() as session:
        yield session


@pytest.fixture
def seed():
    return seed_restaurant


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def context(clock, notifier):
    return ReservationContext(clock=clock, notifier=notifier)


@pytest.fixture
def service(test_db, context):
    return context.service(test_db)


@pytest.fixture
def customer():
    return Actor(id=42, role=Role.CUSTOMER)


@pytest.fixture
def other_customer():
    return Actor(id=43, role=Role.CUSTOMER)


@pytest.fixture
def staff():
    return Actor(id=900, role=Role.STAFF)


@pytest.fixture
def admin():
    return Actor(id=901, role=Role.ADMIN)


@pytest.fixture
def make_draft():
    """Factory for booking input with the Alice defaults"""
    def _make(**overrides) -> ReservationDraft:
        values = dict(
            customer_name="Alice",
            contact="a@x",
            table_id=TableId(4),
            date_time=SATURDAY_EVENING,
            party_size=4,
            notes=None,
            customer_id=CustomerId(42),
        )
        values.update(overrides)
        return ReservationDraft(**values)
    return _make


@pytest.fixture
async def client(test_db, context):
    """Create test client with overridden database and reservation context"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    previous_context = app.state.reservation_context
    app.state.reservation_context = context

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    app.state.reservation_context = previous_context


def auth_headers(actor: Actor) -> dict:
    return {"Authorization": f"Bearer {create_access_token(actor)}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_customer_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
