"""Pydantic schemas for request/response validation"""

from tablebook.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReassignRequest,
    ReservationResponse,
    ReservationListResponse,
    AvailabilityResponse,
    TableAvailabilityResponse,
)
from tablebook.schemas.table import (
    TableCreate,
    TableResponse,
)

__all__ = [
    "ReservationCreate",
    "ReservationUpdate",
    "ReassignRequest",
    "ReservationResponse",
    "ReservationListResponse",
    "AvailabilityResponse",
    "TableAvailabilityResponse",
    "TableCreate",
    "TableResponse",
]
