"""Booking rules: business hours, capacity, conflicts and cutoffs"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from tablebook.reservations.clock import Clock
from tablebook.reservations.policy_store import ConfigMissing, PolicyStore
from tablebook.reservations.results import ErrorKind
from tablebook.reservations.store import ReservationStore
from tablebook.reservations.table_catalog import TableCatalog
from tablebook.reservations.types import CutoffKind, ReservationId, TableId
from tablebook.utils.time import to_local

logger = structlog.get_logger()


class ReservationValidator:
    """
    Predicates over a proposed booking.

    Each check answers one question; `check_booking` composes them in
    the order the service reports failures: past time, business hours,
    unknown table, party size, conflict. Local checks run before the
    conflict query.
    """

    def __init__(
        self,
        clock: Clock,
        policies: PolicyStore,
        tables: TableCatalog,
        reservations: ReservationStore,
    ):
        self.clock = clock
        self.policies = policies
        self.tables = tables
        self.reservations = reservations

    async def is_within_business_hours(self, instant: datetime) -> bool:
        local = to_local(instant)
        window = await self.policies.get_business_hours(local.isoweekday())
        if window is None:
            return False
        return window.contains(local.time().replace(second=0, microsecond=0))

    async def is_party_size_valid(self, table_id: TableId, party_size: int) -> bool:
        capacity = await self.tables.capacity(table_id)
        if capacity is None:
            return False
        return 1 <= party_size <= capacity

    def is_in_future(self, instant: datetime) -> bool:
        return _utc(instant) > _utc(self.clock.now())

    async def has_conflict(
        self,
        table_id: TableId,
        instant: datetime,
        exclude_id: Optional[ReservationId] = None,
    ) -> bool:
        return await self.reservations.count_active_at(table_id, instant, exclude_id) > 0

    async def is_within_cutoff(self, instant: datetime, kind: CutoffKind) -> bool:
        """True while the reservation is still more than the cutoff away"""
        try:
            hours = await self.policies.get_cutoff_hours(kind)
        except ConfigMissing:
            logger.warning("Cutoff policy missing, refusing change", policy_type=kind.value)
            return False
        return _utc(instant) > _utc(self.clock.now()) + timedelta(hours=hours)

    async def check_booking(
        self,
        table_id: TableId,
        instant: datetime,
        party_size: int,
        exclude_id: Optional[ReservationId] = None,
    ) -> Optional[ErrorKind]:
        """First failing rule for a booking, or None when it may proceed"""
        if not self.is_in_future(instant):
            return ErrorKind.PAST_TIME
        if not await self.is_within_business_hours(instant):
            return ErrorKind.OUTSIDE_HOURS
        if await self.tables.get(table_id) is None:
            return ErrorKind.UNKNOWN_TABLE
        if not await self.is_party_size_valid(table_id, party_size):
            return ErrorKind.CAPACITY_EXCEEDED
        if await self.has_conflict(table_id, instant, exclude_id):
            return ErrorKind.TABLE_CONFLICT
        return None


def _utc(dt: datetime) -> datetime:
    return to_local(dt).astimezone(timezone.utc)
