"""Tests for guest messaging and reminders"""

from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from tablebook.jobs import tasks
from tablebook.reservations.events import ReservationCancelled, ReservationConfirmed
from tablebook.reservations.store import ReservationStore

DENVER = ZoneInfo("America/Denver")
SLOT = datetime(2025, 10, 25, 19, 30, tzinfo=DENVER)


def confirmed_payload(**overrides) -> dict:
    event = ReservationConfirmed(
        reference_id="RESABC",
        customer_name="Alice",
        contact="+15055550123",
        date_time=SLOT,
        table_id=4,
        party_size=4,
        price=Decimal("25"),
        notes="Window seat",
        cutoff_hours=3,
    )
    return {**event.to_payload(), **overrides}


def test_is_phone():
    assert tasks.is_phone("+1 (505) 555-0123")
    assert tasks.is_phone("505.555.0123")
    assert not tasks.is_phone("a@x")
    assert not tasks.is_phone("call me")


def test_confirmation_message():
    message = tasks.render_event_message(confirmed_payload())

    assert "RESABC" in message
    assert "Oct 25, 2025 at 07:30 PM" in message
    assert "party of 4" in message
    assert "$25.00" in message
    assert "Window seat" in message
    assert "at least 3 hours in advance" in message


def test_confirmation_message_without_cutoff_policy():
    message = tasks.render_event_message(confirmed_payload(cutoff_hours=None))

    assert "hours in advance" not in message
    assert "in advance" in message


def test_cancellation_message():
    event = ReservationCancelled(
        reference_id="RESABC",
        customer_name="Alice",
        contact="a@x",
        original_date_time=SLOT,
    )

    message = tasks.render_event_message(event.to_payload())

    assert "RESABC" in message
    assert "cancelled" in message
    assert "Oct 25, 2025 at 07:30 PM" in message


def test_unknown_event_kind():
    with pytest.raises(ValueError):
        tasks.render_event_message({"kind": "reservation_exploded"})


def test_deliver_sends_sms_to_phone_contacts(monkeypatch):
    sent = []
    monkeypatch.setattr(tasks, "send_sms", lambda to, body: sent.append((to, body)))

    tasks.deliver_reservation_event(confirmed_payload())

    assert len(sent) == 1
    assert sent[0][0] == "+15055550123"


def test_deliver_skips_email_contacts(monkeypatch):
    sent = []
    monkeypatch.setattr(tasks, "send_sms", lambda to, body: sent.append((to, body)))

    tasks.deliver_reservation_event(confirmed_payload(contact="a@x"))

    assert sent == []


def test_deliver_survives_gateway_errors(monkeypatch):
    def broken(to, body):
        raise RuntimeError("gateway down")

    monkeypatch.setattr(tasks, "send_sms", broken)

    tasks.deliver_reservation_event(confirmed_payload())


@pytest.mark.asyncio
async def test_due_reminders(test_db, service, make_draft, customer, staff, clock):
    soon = await service.create(
        make_draft(date_time=clock.now() + timedelta(hours=3), contact="+15055550123"), customer
    )
    later = await service.create(make_draft(date_time=clock.now() + timedelta(hours=6)), customer)
    seated = await service.create(
        make_draft(date_time=clock.now() + timedelta(hours=3), table_id=7, party_size=2), customer
    )
    await service.mark_seated(seated.value.id, staff)

    store = ReservationStore(test_db, clock)
    start = clock.now() + timedelta(hours=2)
    due = await store.list_due_reminders(start, start + timedelta(hours=2))

    assert [r.id for r in due] == [soon.value.id]
    assert later.value.id not in [r.id for r in due]

    await store.mark_reminder_sent(soon.value.id, clock.now())

    assert await store.list_due_reminders(start, start + timedelta(hours=2)) == []
    refreshed = await store.get_by_id(soon.value.id)
    assert refreshed.reminder_sent == clock.now()
    assert refreshed.modified_at == soon.value.created_at
