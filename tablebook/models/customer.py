"""Customer model"""

from sqlalchemy import Column, String, Integer, DateTime, func
from sqlalchemy.orm import relationship

from tablebook.database import Base


class Customer(Base):
    """Registered customers; reservations optionally point at one"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(32))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    reservations = relationship("Reservation", back_populates="customer")
