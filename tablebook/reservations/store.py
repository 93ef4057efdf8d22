"""Persistence for reservations"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from tablebook.reservations.clock import Clock
from tablebook.reservations.types import CustomerId, ReferenceId, ReservationId, TableId
from tablebook.utils.time import local_day_bounds, to_minute

_ACTIVE = [s.value for s in ACTIVE_STATUSES]


class StoreError(Exception):
    """Base for write failures the service knows how to handle"""


class DuplicateReference(StoreError):
    """The reference id is already taken"""


class SlotTaken(StoreError):
    """Another active reservation already holds the table at that minute"""


class ReservationStore:
    """
    Reservation persistence over one session.

    Every write is a single committed unit. A failed write rolls the session
    back. Reference and active-slot collisions are reported as a StoreError;
    any other database error, foreign keys included, is re-raised.
    """

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock

    async def insert(self, draft: Reservation) -> Reservation:
        """Persist a new reservation, assigning id and timestamps"""
        now = self.clock.now()
        draft.created_at = now
        draft.modified_at = now
        draft.date_time = to_minute(draft.date_time)
        reference_id, table_id, at = draft.reference_id, draft.table_id, draft.date_time
        self.session.add(draft)

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if await self._reference_exists(reference_id):
                raise DuplicateReference(reference_id) from e
            if await self.count_active_at(table_id, at) > 0:
                raise SlotTaken(f"table {table_id} at {at.isoformat()}") from e
            raise
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(draft)
        return draft

    async def update_all(self, reservation: Reservation) -> bool:
        """Replace the mutable fields of an existing reservation"""
        return await self._update(
            reservation.id,
            customer_name=reservation.customer_name,
            contact=reservation.contact,
            table_id=reservation.table_id,
            date_time=to_minute(reservation.date_time),
            party_size=reservation.party_size,
            status=ReservationStatus(reservation.status).value,
            notes=reservation.notes,
        )

    async def update_status(self, reservation_id: ReservationId, status: ReservationStatus) -> bool:
        return await self._update(reservation_id, status=status.value)

    async def reassign(
        self,
        reservation_id: ReservationId,
        new_table_id: TableId,
        new_date_time: datetime,
    ) -> bool:
        return await self._update(
            reservation_id,
            table_id=new_table_id,
            date_time=to_minute(new_date_time),
        )

    async def mark_reminder_sent(self, reservation_id: ReservationId, at: datetime) -> bool:
        return await self._update(reservation_id, touch=False, reminder_sent=at)

    async def _update(self, reservation_id: ReservationId, touch: bool = True, **values) -> bool:
        if touch:
            values["modified_at"] = self.clock.now()

        try:
            result = await self.session.execute(
                update(Reservation)
                .where(Reservation.id == reservation_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if await self._slot_held(reservation_id, values):
                raise SlotTaken(f"reservation {reservation_id}") from e
            raise
        except Exception:
            await self.session.rollback()
            raise

        if result.rowcount == 0:
            return False

        # Drop the cached instance so the next read sees the new row
        cached = await self.session.get(Reservation, reservation_id)
        if cached is not None:
            await self.session.refresh(cached)
        return True

    async def get_by_id(self, reservation_id: ReservationId) -> Optional[Reservation]:
        return await self.session.get(Reservation, reservation_id)

    async def get_by_reference(self, reference_id: ReferenceId) -> Optional[Reservation]:
        result = await self.session.execute(
            select(Reservation).where(Reservation.reference_id == reference_id)
        )
        return result.scalar_one_or_none()

    async def list_by_customer(self, customer_id: CustomerId) -> List[Reservation]:
        """A customer's reservations, latest first"""
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.customer_id == customer_id)
            .order_by(Reservation.date_time.desc(), Reservation.id.desc())
        )
        return list(result.scalars().all())

    async def list_by_date(self, day: date) -> List[Reservation]:
        """Reservations on a local calendar day, earliest first"""
        start, end = local_day_bounds(day)
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.date_time >= start, Reservation.date_time < end)
            .order_by(Reservation.date_time.asc(), Reservation.id.asc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[Reservation]:
        result = await self.session.execute(
            select(Reservation).order_by(Reservation.date_time.asc(), Reservation.id.asc())
        )
        return list(result.scalars().all())

    async def list_due_reminders(self, start: datetime, end: datetime) -> List[Reservation]:
        """Confirmed reservations in [start, end] that have not been reminded"""
        result = await self.session.execute(
            select(Reservation)
            .where(
                Reservation.date_time.between(start, end),
                Reservation.status == ReservationStatus.CONFIRMED.value,
                Reservation.reminder_sent.is_(None),
            )
            .order_by(Reservation.date_time.asc())
        )
        return list(result.scalars().all())

    async def count_active_at(
        self,
        table_id: TableId,
        instant: datetime,
        exclude_id: Optional[ReservationId] = None,
    ) -> int:
        """Active reservations holding a table at exactly this minute"""
        query = select(func.count(Reservation.id)).where(
            Reservation.table_id == table_id,
            Reservation.date_time == to_minute(instant),
            Reservation.status.in_(_ACTIVE),
        )
        if exclude_id:
            query = query.where(Reservation.id != exclude_id)

        result = await self.session.execute(query)
        return result.scalar() or 0

    async def _slot_held(self, reservation_id: ReservationId, values: dict) -> bool:
        """Whether another active row holds the slot an update was moving into"""
        current = await self.session.get(Reservation, reservation_id)
        if current is None:
            return False
        table_id = values.get("table_id", current.table_id)
        at = values.get("date_time", current.date_time)
        return await self.count_active_at(table_id, at, exclude_id=reservation_id) > 0

    async def _reference_exists(self, reference_id: str) -> bool:
        result = await self.session.execute(
            select(func.count(Reservation.id)).where(Reservation.reference_id == reference_id)
        )
        return (result.scalar() or 0) > 0
