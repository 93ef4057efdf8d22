"""Business hours and reservation policy models"""

from sqlalchemy import Column, String, Integer, Time, Text, CheckConstraint

from tablebook.database import Base


class BusinessHours(Base):
    """Opening window per ISO day of week (1=Monday, 7=Sunday)"""
    __tablename__ = "business_hours"

    day_of_week = Column(Integer, primary_key=True, autoincrement=False)
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_business_hours_day"),
    )


class ReservationPolicy(Base):
    """Cutoff policies, one row per policy type (cancellation, modification)"""
    __tablename__ = "reservation_policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_type = Column(String(50), unique=True, nullable=False)
    hours_before = Column(Integer, nullable=False)
    description = Column(Text)
