"""Domain events and the notifiers that deliver them"""

from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Union

import structlog

from tablebook.models.reservation import Reservation

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReservationConfirmed:
    reference_id: str
    customer_name: str
    contact: str
    date_time: datetime
    table_id: int
    party_size: int
    price: Decimal
    notes: Optional[str] = None
    cutoff_hours: Optional[int] = None

    kind = "reservation_confirmed"

    @classmethod
    def from_reservation(
        cls,
        reservation: Reservation,
        price: Decimal,
        cutoff_hours: Optional[int] = None,
    ) -> "ReservationConfirmed":
        return cls(
            reference_id=reservation.reference_id,
            customer_name=reservation.customer_name,
            contact=reservation.contact,
            date_time=reservation.date_time,
            table_id=reservation.table_id,
            party_size=reservation.party_size,
            price=price,
            notes=reservation.notes,
            cutoff_hours=cutoff_hours,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind
        payload["date_time"] = self.date_time.isoformat()
        payload["price"] = f"{self.price:.2f}"
        return payload


@dataclass(frozen=True)
class ReservationCancelled:
    reference_id: str
    customer_name: str
    contact: str
    original_date_time: datetime

    kind = "reservation_cancelled"

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ReservationCancelled":
        return cls(
            reference_id=reservation.reference_id,
            customer_name=reservation.customer_name,
            contact=reservation.contact,
            original_date_time=reservation.date_time,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind
        payload["original_date_time"] = self.original_date_time.isoformat()
        return payload


ReservationEvent = Union[ReservationConfirmed, ReservationCancelled]


class Notifier(Protocol):
    async def notify(self, event: ReservationEvent) -> None:
        ...


class LogNotifier:
    """Writes events to the structured log only"""

    async def notify(self, event: ReservationEvent) -> None:
        logger.info("Reservation event", **event.to_payload())


class CeleryNotifier:
    """Hands events to the background worker for SMS delivery"""

    async def notify(self, event: ReservationEvent) -> None:
        from tablebook.jobs.tasks import deliver_reservation_event

        deliver_reservation_event.delay(event.to_payload())
        logger.info("Reservation event queued", kind=event.kind, reference_id=event.reference_id)


class RecordingNotifier:
    """Keeps events in memory; used by tests and local tooling"""

    def __init__(self):
        self.events: List[ReservationEvent] = []

    async def notify(self, event: ReservationEvent) -> None:
        self.events.append(event)


def build_notifier(backend: str) -> Notifier:
    notifiers = {
        "log": LogNotifier,
        "celery": CeleryNotifier,
    }
    notifier_class = notifiers.get(backend)
    if not notifier_class:
        raise ValueError(f"Unknown notifier backend: {backend}")
    return notifier_class()
