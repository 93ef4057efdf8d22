"""Reservation schemas"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from tablebook.schemas.table import TableResponse
from tablebook.utils.time import to_minute


def _localize(v: Optional[datetime]) -> Optional[datetime]:
    return to_minute(v) if v is not None else None


class ReservationCreate(BaseModel):
    """Create reservation request"""
    customer_name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=255)
    table_id: int
    date_time: datetime
    party_size: int
    notes: Optional[str] = None
    customer_id: Optional[int] = None

    @field_validator("date_time")
    @classmethod
    def localize_date_time(cls, v: datetime) -> datetime:
        return to_minute(v)


class ReservationUpdate(BaseModel):
    """Modify reservation request"""
    table_id: Optional[int] = None
    date_time: Optional[datetime] = None
    party_size: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("date_time")
    @classmethod
    def localize_date_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _localize(v)


class ReassignRequest(BaseModel):
    """Move a reservation to another table and/or time (staff)"""
    table_id: int
    date_time: datetime

    @field_validator("date_time")
    @classmethod
    def localize_date_time(cls, v: datetime) -> datetime:
        return to_minute(v)


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: int
    reference_id: str
    customer_id: Optional[int]
    customer_name: str
    contact: str
    table_id: int
    date_time: datetime
    party_size: int
    status: str
    notes: Optional[str]
    created_at: datetime
    modified_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Reservation list"""
    items: List[ReservationResponse]
    total: int


class TableAvailabilityResponse(BaseModel):
    """One table in the layout view"""
    table: TableResponse
    available: bool


class AvailabilityResponse(BaseModel):
    """Availability check response"""
    date: str
    time: str
    party_size: Optional[int]
    tables: List[TableAvailabilityResponse] = []
