"""Reservation core: validation, persistence and use cases"""

from tablebook.reservations.availability import AvailabilityProjector, TableAvailability
from tablebook.reservations.clock import Clock, FixedClock, SystemClock
from tablebook.reservations.context import ReservationContext
from tablebook.reservations.results import ErrorKind, Result
from tablebook.reservations.service import ReservationChanges, ReservationDraft, ReservationService
from tablebook.reservations.types import Actor, CutoffKind, Role

__all__ = [
    "AvailabilityProjector",
    "TableAvailability",
    "Clock",
    "FixedClock",
    "SystemClock",
    "ReservationContext",
    "ErrorKind",
    "Result",
    "ReservationChanges",
    "ReservationDraft",
    "ReservationService",
    "Actor",
    "CutoffKind",
    "Role",
]
