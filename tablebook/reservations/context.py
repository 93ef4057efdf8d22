"""Application context shared by every reservation call"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.config import Settings
from tablebook.reservations.availability import AvailabilityProjector
from tablebook.reservations.clock import Clock, SystemClock
from tablebook.reservations.events import Notifier, build_notifier
from tablebook.reservations.locks import SlotLocks
from tablebook.reservations.references import ReferenceGenerator, generate_reference_id
from tablebook.reservations.service import ReservationService
from tablebook.reservations.store import ReservationStore
from tablebook.reservations.table_catalog import TableCatalog


@dataclass
class ReservationContext:
    """Long-lived collaborators; sessions are supplied per call"""
    clock: Clock
    notifier: Notifier
    locks: SlotLocks = field(default_factory=SlotLocks)
    reference_generator: ReferenceGenerator = generate_reference_id
    reference_id_retries: int = 3
    timeout_seconds: Optional[float] = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReservationContext":
        return cls(
            clock=SystemClock(),
            notifier=build_notifier(settings.notifier_backend),
            reference_id_retries=settings.reference_id_retries,
            timeout_seconds=settings.store_timeout_seconds,
        )

    def service(self, session: AsyncSession) -> ReservationService:
        return ReservationService(session, self)

    def projector(self, session: AsyncSession) -> AvailabilityProjector:
        return AvailabilityProjector(TableCatalog(session), ReservationStore(session, self.clock))
