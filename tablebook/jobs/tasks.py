"""Background job tasks"""

import asyncio
import re
from datetime import timedelta
from typing import Any, Dict

import structlog

from tablebook.jobs.celery_app import celery_app
from tablebook.config import settings
from tablebook.utils.time import display, parse_local_datetime

logger = structlog.get_logger()

PHONE_PATTERN = re.compile(r"^\+?[0-9()\-\s.]{7,}$")


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def is_phone(contact: str) -> bool:
    return "@" not in contact and bool(PHONE_PATTERN.match(contact.strip()))


def render_event_message(payload: Dict[str, Any]) -> str:
    """Guest-facing text for a reservation event payload"""
    kind = payload.get("kind")

    if kind == "reservation_confirmed":
        when = display(parse_local_datetime(payload["date_time"]))
        message = f"Hi {payload['customer_name']}, your reservation at {settings.restaurant_name} is confirmed. "
        message += f"Reference: {payload['reference_id']}. "
        message += f"{when}, party of {payload['party_size']}, table {payload['table_id']}. "
        message += f"Table price: ${payload['price']}. "
        if payload.get("notes"):
            message += f"Notes: {payload['notes']}. "
        if payload.get("cutoff_hours") is not None:
            message += f"Cancellations must be made at least {payload['cutoff_hours']} hours in advance."
        else:
            message += "Please let us know in advance if your plans change."
        return message

    if kind == "reservation_cancelled":
        when = display(parse_local_datetime(payload["original_date_time"]))
        message = f"Hi {payload['customer_name']}, your reservation {payload['reference_id']} "
        message += f"at {settings.restaurant_name} for {when} has been cancelled. "
        message += "We hope to see you another time!"
        return message

    raise ValueError(f"Unknown reservation event: {kind}")


def send_sms(to: str, body: str) -> None:
    from twilio.rest import Client as TwilioClient

    client = TwilioClient(settings.twilio_account_sid, settings.twilio_auth_token)
    client.messages.create(
        body=body,
        from_=settings.twilio_phone_number,
        to=to,
    )


@celery_app.task(name="deliver_reservation_event")
def deliver_reservation_event(payload: Dict[str, Any]):
    """Send the confirmation or cancellation message for an event"""
    reference_id = payload.get("reference_id")
    contact = payload.get("contact", "")
    logger.info("Delivering reservation event", kind=payload.get("kind"), reference_id=reference_id)

    message = render_event_message(payload)

    if not is_phone(contact):
        # Email delivery is not wired up yet
        logger.info("Skipped non-SMS contact", reference_id=reference_id)
        return

    try:
        send_sms(contact, message)
        logger.info("Sent reservation message", reference_id=reference_id)
    except Exception as e:
        logger.error(
            "Failed to send reservation message",
            reference_id=reference_id,
            error=str(e),
        )


@celery_app.task(name="send_reservation_reminders")
def send_reservation_reminders():
    """Send reminders for upcoming reservations"""
    logger.info("Sending reservation reminders")

    async def _send_reminders():
        from tablebook.database import SessionLocal
        from tablebook.reservations.clock import SystemClock
        from tablebook.reservations.store import ReservationStore

        clock = SystemClock()
        now = clock.now()
        reminder_start = now + timedelta(hours=settings.reminder_lead_hours)
        reminder_end = reminder_start + timedelta(hours=settings.reminder_window_hours)

        async with SessionLocal() as db:
            store = ReservationStore(db, clock)
            reservations = await store.list_due_reminders(reminder_start, reminder_end)

            sent = 0
            for reservation in reservations:
                if not is_phone(reservation.contact):
                    continue
                try:
                    message = f"Reminder: Your reservation at {settings.restaurant_name} is coming up! "
                    message += f"{reservation.party_size} guests at "
                    message += f"{reservation.date_time.strftime('%I:%M %p')}. "
                    message += f"Reference: {reservation.reference_id}. See you soon!"

                    send_sms(reservation.contact, message)
                    await store.mark_reminder_sent(reservation.id, clock.now())
                    sent += 1

                    logger.info(
                        "Sent reservation reminder",
                        reservation_id=reservation.id,
                    )

                except Exception as e:
                    logger.error(
                        "Failed to send reservation reminder",
                        reservation_id=reservation.id,
                        error=str(e),
                    )

            return sent

    return run_async(_send_reminders())
