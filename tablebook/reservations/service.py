"""Reservation use cases"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, List, Optional, TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tablebook.models.reservation import Reservation, ReservationStatus
from tablebook.reservations.events import ReservationCancelled, ReservationConfirmed, ReservationEvent
from tablebook.reservations.policy_store import ConfigMissing, PolicyStore
from tablebook.reservations.results import ErrorKind, Result
from tablebook.reservations.store import DuplicateReference, ReservationStore, SlotTaken, StoreError
from tablebook.reservations.table_catalog import TableCatalog
from tablebook.reservations.types import (
    Actor,
    CustomerId,
    CutoffKind,
    ReferenceId,
    ReservationId,
    Role,
    TableId,
)
from tablebook.reservations.validator import ReservationValidator
from tablebook.utils.time import to_minute

if TYPE_CHECKING:
    from tablebook.reservations.context import ReservationContext

logger = structlog.get_logger()


@dataclass
class ReservationDraft:
    """Input for a new booking"""
    customer_name: str
    contact: str
    table_id: TableId
    date_time: datetime
    party_size: int
    notes: Optional[str] = None
    customer_id: Optional[CustomerId] = None


class _Unchanged:
    def __repr__(self):
        return "UNCHANGED"


UNCHANGED: Any = _Unchanged()


@dataclass
class ReservationChanges:
    """
    Fields a guest may change; None keeps the current value.

    Notes can be cleared, so they use UNCHANGED to mean "keep" and None
    to mean "remove".
    """
    table_id: Optional[TableId] = None
    date_time: Optional[datetime] = None
    party_size: Optional[int] = None
    notes: Optional[str] = UNCHANGED


class ReservationService:
    """
    The only writer of reservations.

    One instance serves one call context and borrows a single session for
    it. Operations return a Result; rule violations come back as error
    kinds, while database errors and timeouts come back as INTERNAL.

    Check-then-write sequences run under the context's per-slot lock, and
    the active-slot unique index rejects anything that slips past it from
    another process.
    """

    def __init__(self, session: AsyncSession, context: "ReservationContext"):
        self.session = session
        self.context = context
        self.clock = context.clock
        self.notifier = context.notifier
        self.locks = context.locks

        self.policies = PolicyStore(session)
        self.tables = TableCatalog(session)
        self.reservations = ReservationStore(session, context.clock)
        self.validator = ReservationValidator(
            context.clock, self.policies, self.tables, self.reservations
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create(self, draft: ReservationDraft, actor: Actor) -> Result[Reservation]:
        return await self._run("create", self._create(draft, actor))

    async def modify(
        self,
        reference_id: ReferenceId,
        changes: ReservationChanges,
        actor: Actor,
    ) -> Result[Reservation]:
        return await self._run("modify", self._modify(reference_id, changes, actor))

    async def cancel(self, reference_id: ReferenceId, actor: Actor) -> Result[Reservation]:
        return await self._run("cancel", self._cancel(reference_id, actor))

    async def reassign(
        self,
        reservation_id: ReservationId,
        new_table_id: TableId,
        new_date_time: datetime,
        actor: Actor,
    ) -> Result[Reservation]:
        return await self._run(
            "reassign", self._reassign(reservation_id, new_table_id, new_date_time, actor)
        )

    async def mark_seated(self, reservation_id: ReservationId, actor: Actor) -> Result[Reservation]:
        return await self._run(
            "mark_seated",
            self._transition(reservation_id, actor, ReservationStatus.CONFIRMED, ReservationStatus.SEATED),
        )

    async def mark_no_show(self, reservation_id: ReservationId, actor: Actor) -> Result[Reservation]:
        return await self._run(
            "mark_no_show",
            self._transition(reservation_id, actor, ReservationStatus.CONFIRMED, ReservationStatus.NO_SHOW),
        )

    async def complete(self, reservation_id: ReservationId, actor: Actor) -> Result[Reservation]:
        return await self._run(
            "complete",
            self._transition(reservation_id, actor, ReservationStatus.SEATED, ReservationStatus.COMPLETED),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_by_reference(self, reference_id: ReferenceId, actor: Actor) -> Result[Reservation]:
        return await self._run("get_by_reference", self._get_by_reference(reference_id, actor))

    async def list_for_customer(
        self,
        customer_id: CustomerId,
        actor: Actor,
    ) -> Result[List[Reservation]]:
        return await self._run("list_for_customer", self._list_for_customer(customer_id, actor))

    async def list_all(self, actor: Actor) -> Result[List[Reservation]]:
        return await self._run("list_all", self._staff_list(actor, self.reservations.list_all))

    async def list_by_date(self, day: date, actor: Actor) -> Result[List[Reservation]]:
        return await self._run(
            "list_by_date", self._staff_list(actor, lambda: self.reservations.list_by_date(day))
        )

    # ------------------------------------------------------------------
    # Implementation
    # ------------------------------------------------------------------

    async def _create(self, draft: ReservationDraft, actor: Actor) -> Result[Reservation]:
        at = to_minute(draft.date_time)
        customer_id = actor.customer_id if actor.role == Role.CUSTOMER else draft.customer_id

        async with self.locks.for_slot(draft.table_id, at):
            error = await self.validator.check_booking(draft.table_id, at, draft.party_size)
            if error:
                return self._reject("create", error, table_id=draft.table_id, date_time=at.isoformat())

            reservation = None
            attempts = 1 + self.context.reference_id_retries
            for attempt in range(1, attempts + 1):
                candidate = Reservation(
                    reference_id=self.context.reference_generator(),
                    customer_id=customer_id,
                    customer_name=draft.customer_name,
                    contact=draft.contact,
                    table_id=draft.table_id,
                    date_time=at,
                    party_size=draft.party_size,
                    status=ReservationStatus.CONFIRMED.value,
                    notes=draft.notes,
                )
                try:
                    reservation = await self.reservations.insert(candidate)
                    break
                except DuplicateReference:
                    logger.warning(
                        "Reference id collision",
                        reference_id=candidate.reference_id,
                        attempt=attempt,
                    )
                except SlotTaken:
                    return self._reject(
                        "create", ErrorKind.TABLE_CONFLICT,
                        table_id=draft.table_id, date_time=at.isoformat(),
                    )

            if reservation is None:
                logger.error("Could not allocate a reference id", attempts=attempts)
                return Result.failure(ErrorKind.INTERNAL, "could not allocate a unique reference id")

        logger.info(
            "Reservation created",
            reservation_id=reservation.id,
            reference_id=reservation.reference_id,
            table_id=reservation.table_id,
            date_time=reservation.date_time.isoformat(),
            party_size=reservation.party_size,
        )

        price = await self.tables.price(reservation.table_id)
        cutoff_hours = await self._cancellation_cutoff()
        await self._emit(ReservationConfirmed.from_reservation(reservation, price, cutoff_hours))
        return Result.success(reservation)

    async def _modify(
        self,
        reference_id: ReferenceId,
        changes: ReservationChanges,
        actor: Actor,
    ) -> Result[Reservation]:
        existing = await self.reservations.get_by_reference(reference_id)
        if existing is None:
            return self._reject("modify", ErrorKind.NOT_FOUND, reference_id=reference_id)
        if not actor.may_access(existing.customer_id):
            return self._reject("modify", ErrorKind.FORBIDDEN, reference_id=reference_id)
        if existing.status != ReservationStatus.CONFIRMED.value:
            return self._reject("modify", ErrorKind.NOT_MODIFIABLE, reference_id=reference_id)
        if not await self.validator.is_within_cutoff(existing.date_time, CutoffKind.MODIFICATION):
            return self._reject("modify", ErrorKind.CUTOFF_PASSED, reference_id=reference_id)

        # Detached copy so the loaded instance is not flushed early
        proposed = Reservation(
            id=existing.id,
            customer_name=existing.customer_name,
            contact=existing.contact,
            table_id=changes.table_id if changes.table_id is not None else existing.table_id,
            date_time=to_minute(changes.date_time if changes.date_time is not None else existing.date_time),
            party_size=changes.party_size if changes.party_size is not None else existing.party_size,
            status=existing.status,
            notes=existing.notes if changes.notes is UNCHANGED else changes.notes,
        )

        async with self.locks.for_slot(proposed.table_id, proposed.date_time):
            error = await self.validator.check_booking(
                proposed.table_id, proposed.date_time, proposed.party_size, exclude_id=existing.id
            )
            if error:
                return self._reject("modify", error, reference_id=reference_id)

            try:
                updated = await self.reservations.update_all(proposed)
            except SlotTaken:
                return self._reject("modify", ErrorKind.TABLE_CONFLICT, reference_id=reference_id)

        if not updated:
            return self._reject("modify", ErrorKind.NOT_FOUND, reference_id=reference_id)

        logger.info(
            "Reservation modified",
            reference_id=reference_id,
            table_id=proposed.table_id,
            date_time=proposed.date_time.isoformat(),
            party_size=proposed.party_size,
        )
        return Result.success(await self.reservations.get_by_id(existing.id))

    async def _cancel(self, reference_id: ReferenceId, actor: Actor) -> Result[Reservation]:
        existing = await self.reservations.get_by_reference(reference_id)
        if existing is None:
            return self._reject("cancel", ErrorKind.NOT_FOUND, reference_id=reference_id)
        if not actor.may_access(existing.customer_id):
            return self._reject("cancel", ErrorKind.FORBIDDEN, reference_id=reference_id)
        if existing.status != ReservationStatus.CONFIRMED.value:
            return self._reject("cancel", ErrorKind.NOT_CANCELABLE, reference_id=reference_id)
        if not await self.validator.is_within_cutoff(existing.date_time, CutoffKind.CANCELLATION):
            return self._reject("cancel", ErrorKind.CUTOFF_PASSED, reference_id=reference_id)

        if not await self.reservations.update_status(existing.id, ReservationStatus.CANCELLED):
            return self._reject("cancel", ErrorKind.NOT_FOUND, reference_id=reference_id)

        reservation = await self.reservations.get_by_id(existing.id)
        logger.info("Reservation cancelled", reference_id=reference_id)

        await self._emit(ReservationCancelled.from_reservation(reservation))
        return Result.success(reservation)

    async def _reassign(
        self,
        reservation_id: ReservationId,
        new_table_id: TableId,
        new_date_time: datetime,
        actor: Actor,
    ) -> Result[Reservation]:
        if not actor.is_staff:
            return self._reject("reassign", ErrorKind.FORBIDDEN, reservation_id=reservation_id)

        existing = await self.reservations.get_by_id(reservation_id)
        if existing is None:
            return self._reject("reassign", ErrorKind.NOT_FOUND, reservation_id=reservation_id)
        if existing.status not in (ReservationStatus.CONFIRMED.value, ReservationStatus.SEATED.value):
            return self._reject("reassign", ErrorKind.NOT_MODIFIABLE, reservation_id=reservation_id)
        if await self.tables.get(new_table_id) is None:
            return self._reject("reassign", ErrorKind.UNKNOWN_TABLE, reservation_id=reservation_id)

        # Staff override: hours and party size are not checked
        at = to_minute(new_date_time)
        async with self.locks.for_slot(new_table_id, at):
            if await self.validator.has_conflict(new_table_id, at, reservation_id):
                return self._reject("reassign", ErrorKind.TABLE_CONFLICT, reservation_id=reservation_id)
            try:
                updated = await self.reservations.reassign(reservation_id, new_table_id, at)
            except SlotTaken:
                return self._reject("reassign", ErrorKind.TABLE_CONFLICT, reservation_id=reservation_id)

        if not updated:
            return self._reject("reassign", ErrorKind.NOT_FOUND, reservation_id=reservation_id)

        logger.info(
            "Reservation reassigned",
            reservation_id=reservation_id,
            table_id=new_table_id,
            date_time=at.isoformat(),
            actor_id=actor.id,
        )
        return Result.success(await self.reservations.get_by_id(reservation_id))

    async def _transition(
        self,
        reservation_id: ReservationId,
        actor: Actor,
        source: ReservationStatus,
        target: ReservationStatus,
    ) -> Result[Reservation]:
        operation = f"mark_{target.value}"
        if not actor.is_staff:
            return self._reject(operation, ErrorKind.FORBIDDEN, reservation_id=reservation_id)

        existing = await self.reservations.get_by_id(reservation_id)
        if existing is None:
            return self._reject(operation, ErrorKind.NOT_FOUND, reservation_id=reservation_id)
        if existing.status != source.value:
            return self._reject(operation, ErrorKind.NOT_MODIFIABLE, reservation_id=reservation_id)

        if not await self.reservations.update_status(reservation_id, target):
            return self._reject(operation, ErrorKind.NOT_FOUND, reservation_id=reservation_id)

        logger.info("Reservation status changed", reservation_id=reservation_id, status=target.value)
        return Result.success(await self.reservations.get_by_id(reservation_id))

    async def _get_by_reference(self, reference_id: ReferenceId, actor: Actor) -> Result[Reservation]:
        reservation = await self.reservations.get_by_reference(reference_id)
        if reservation is None:
            return Result.failure(ErrorKind.NOT_FOUND)
        if not actor.may_access(reservation.customer_id):
            return Result.failure(ErrorKind.FORBIDDEN)
        return Result.success(reservation)

    async def _list_for_customer(
        self,
        customer_id: CustomerId,
        actor: Actor,
    ) -> Result[List[Reservation]]:
        if not actor.may_access(customer_id):
            return Result.failure(ErrorKind.FORBIDDEN)
        return Result.success(await self.reservations.list_by_customer(customer_id))

    async def _staff_list(
        self,
        actor: Actor,
        query: Callable[[], Awaitable[List[Reservation]]],
    ) -> Result[List[Reservation]]:
        if not actor.is_staff:
            return Result.failure(ErrorKind.FORBIDDEN)
        return Result.success(await query())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run(self, operation: str, work: Awaitable[Result]) -> Result:
        """Apply the store timeout and turn store faults into INTERNAL after a rollback"""
        try:
            return await asyncio.wait_for(work, timeout=self.context.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Reservation operation timed out", operation=operation)
            return Result.failure(ErrorKind.INTERNAL, f"{operation} timed out")
        except (SQLAlchemyError, StoreError) as e:
            await self.session.rollback()
            logger.error("Reservation operation failed", operation=operation, error=str(e))
            return Result.failure(ErrorKind.INTERNAL, str(e))

    async def _cancellation_cutoff(self) -> Optional[int]:
        try:
            return await self.policies.get_cutoff_hours(CutoffKind.CANCELLATION)
        except ConfigMissing:
            return None

    def _reject(self, operation: str, error: ErrorKind, **context) -> Result:
        logger.info("Reservation rejected", operation=operation, error=error.value, **context)
        return Result.failure(error)

    async def _emit(self, event: ReservationEvent) -> None:
        """Deliver an event; delivery problems never fail the operation"""
        try:
            await self.notifier.notify(event)
        except Exception as e:
            logger.error(
                "Failed to deliver reservation event",
                kind=event.kind,
                reference_id=event.reference_id,
                error=str(e),
            )
