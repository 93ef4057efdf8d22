"""Database models"""

from tablebook.models.customer import Customer
from tablebook.models.table import DiningTable
from tablebook.models.policy import BusinessHours, ReservationPolicy
from tablebook.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES

__all__ = [
    "Customer",
    "DiningTable",
    "BusinessHours",
    "ReservationPolicy",
    "Reservation",
    "ReservationStatus",
    "ACTIVE_STATUSES",
]
