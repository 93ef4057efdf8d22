"""Dining table model"""

from decimal import Decimal
from sqlalchemy import Column, String, Integer, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from tablebook.database import Base


class DiningTable(Base):
    """A bookable table in the restaurant layout"""
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_number = Column(String(50), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False)
    zone = Column(String(50), nullable=False, default="Main")
    base_price = Column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    surcharge = Column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))

    reservations = relationship("Reservation", back_populates="table")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_tables_capacity_positive"),
        CheckConstraint("base_price >= 0", name="ck_tables_base_price_non_negative"),
        CheckConstraint("surcharge >= 0", name="ck_tables_surcharge_non_negative"),
    )

    @property
    def total_price(self) -> Decimal:
        return Decimal(self.base_price or 0) + Decimal(self.surcharge or 0)
