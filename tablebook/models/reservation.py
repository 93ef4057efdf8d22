"""Reservation model"""

import enum
from sqlalchemy import Column, String, Integer, ForeignKey, Text, Index, text
from sqlalchemy.orm import relationship

from tablebook.database import Base
from tablebook.utils.time import LocalDateTime


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    CONFIRMED = "confirmed"
    SEATED = "seated"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"
    COMPLETED = "completed"


# Statuses that hold a table at their booking minute
ACTIVE_STATUSES = (ReservationStatus.CONFIRMED, ReservationStatus.SEATED)

_ACTIVE_SLOT_WHERE = text("status IN ('confirmed', 'seated')")


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reference_id = Column(String(32), unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)

    # Guest information
    customer_name = Column(String(255), nullable=False)
    contact = Column(String(255), nullable=False)  # email or phone

    # Booking details
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False)
    date_time = Column(LocalDateTime, nullable=False, index=True)
    party_size = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=ReservationStatus.CONFIRMED.value)
    notes = Column(Text)

    reminder_sent = Column(LocalDateTime)

    # Metadata
    created_at = Column(LocalDateTime, nullable=False)
    modified_at = Column(LocalDateTime, nullable=False)

    # Relationships
    table = relationship("DiningTable", back_populates="reservations")
    customer = relationship("Customer", back_populates="reservations")

    __table_args__ = (
        Index(
            "uq_reservations_active_slot",
            "table_id",
            "date_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
    )
