"""Shared request dependencies and error mapping"""

from typing import NoReturn, TypeVar

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.database import get_db
from tablebook.reservations.availability import AvailabilityProjector
from tablebook.reservations.context import ReservationContext
from tablebook.reservations.results import ErrorKind, Result
from tablebook.reservations.service import ReservationService

T = TypeVar("T")

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.PAST_TIME: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.OUTSIDE_HOURS: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.UNKNOWN_TABLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.TABLE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CUTOFF_PASSED: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_MODIFIABLE: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_CANCELABLE: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_REFERENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_MESSAGES = {
    ErrorKind.NOT_FOUND: "Reservation not found.",
    ErrorKind.FORBIDDEN: "You are not allowed to access this reservation.",
    ErrorKind.PAST_TIME: "Reservation time must be in the future.",
    ErrorKind.OUTSIDE_HOURS: "Reservations are only accepted during business hours.",
    ErrorKind.CAPACITY_EXCEEDED: "Party size does not fit the selected table.",
    ErrorKind.UNKNOWN_TABLE: "The selected table does not exist.",
    ErrorKind.TABLE_CONFLICT: "The selected table/time is already booked. Please choose another.",
    ErrorKind.CUTOFF_PASSED: "The window for changing this reservation has closed.",
    ErrorKind.NOT_MODIFIABLE: "This reservation can no longer be changed.",
    ErrorKind.NOT_CANCELABLE: "This reservation can no longer be cancelled.",
    ErrorKind.DUPLICATE_REFERENCE: "Failed to save reservation. Please try again.",
    ErrorKind.INTERNAL: "Failed to save reservation. Please try again.",
}


def get_reservation_context(request: Request) -> ReservationContext:
    return request.app.state.reservation_context


def get_reservation_service(
    db: AsyncSession = Depends(get_db),
    context: ReservationContext = Depends(get_reservation_context),
) -> ReservationService:
    return context.service(db)


def get_availability_projector(
    db: AsyncSession = Depends(get_db),
    context: ReservationContext = Depends(get_reservation_context),
) -> AvailabilityProjector:
    return context.projector(db)


def raise_for_error(error: ErrorKind) -> NoReturn:
    raise HTTPException(
        status_code=ERROR_STATUS[error],
        detail={"code": error.value, "message": ERROR_MESSAGES[error]},
    )


def unwrap(result: Result[T]) -> T:
    """Return the value of a successful result or raise the mapped HTTP error"""
    if not result.ok:
        raise_for_error(result.error)
    return result.value
