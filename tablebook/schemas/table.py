"""Table schemas"""

from decimal import Decimal
from pydantic import BaseModel, Field


class TableCreate(BaseModel):
    """Create table request"""
    table_number: str = Field(..., min_length=1, max_length=50)
    capacity: int
    zone: str = "Main"
    base_price: Decimal = Decimal("0.00")
    surcharge: Decimal = Decimal("0.00")


class TableResponse(BaseModel):
    """Table response"""
    id: int
    table_number: str
    capacity: int
    zone: str
    base_price: Decimal
    surcharge: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True
