"""Business hours and cutoff policy lookups"""

from dataclasses import dataclass
from datetime import time
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tablebook.models.policy import BusinessHours, ReservationPolicy
from tablebook.reservations.types import CutoffKind

logger = structlog.get_logger()


class ConfigMissing(LookupError):
    """A policy the caller depends on has not been configured"""


@dataclass(frozen=True)
class BusinessHoursWindow:
    open: time
    close: time

    def contains(self, at: time) -> bool:
        return self.open <= at <= self.close


class PolicyStore:
    """
    Reads business hours and cutoff policies.

    Rows are loaded on first use and kept for the lifetime of the store;
    a store lives for one service call, so edits are picked up by the
    next request.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._hours: Optional[Dict[int, BusinessHoursWindow]] = None
        self._cutoffs: Optional[Dict[str, int]] = None

    async def _load(self) -> None:
        if self._hours is None:
            result = await self.session.execute(select(BusinessHours))
            self._hours = {
                row.day_of_week: BusinessHoursWindow(open=row.open_time, close=row.close_time)
                for row in result.scalars().all()
            }
        if self._cutoffs is None:
            result = await self.session.execute(select(ReservationPolicy))
            self._cutoffs = {
                row.policy_type: row.hours_before for row in result.scalars().all()
            }

    def invalidate(self) -> None:
        self._hours = None
        self._cutoffs = None

    async def get_business_hours(self, day_of_week: int) -> Optional[BusinessHoursWindow]:
        """Opening window for an ISO weekday, or None when closed"""
        if not 1 <= day_of_week <= 7:
            raise ValueError(f"day_of_week must be 1..7, got {day_of_week}")
        await self._load()
        return self._hours.get(day_of_week)

    async def get_cutoff_hours(self, kind: CutoffKind) -> int:
        """Minimum hours before a reservation that a change is still allowed"""
        await self._load()
        hours = self._cutoffs.get(kind.value)
        if hours is None:
            raise ConfigMissing(f"no {kind.value} policy configured")
        return hours

    async def set_business_hours(self, day_of_week: int, open_time: time, close_time: time) -> None:
        if not 1 <= day_of_week <= 7:
            raise ValueError(f"day_of_week must be 1..7, got {day_of_week}")
        if close_time < open_time:
            raise ValueError("close_time must not be before open_time")
        row = await self.session.get(BusinessHours, day_of_week)
        if row is None:
            row = BusinessHours(day_of_week=day_of_week)
            self.session.add(row)
        row.open_time = open_time
        row.close_time = close_time
        await self.session.commit()
        self.invalidate()

    async def set_cutoff_hours(
        self,
        kind: CutoffKind,
        hours: int,
        description: Optional[str] = None,
    ) -> None:
        if hours < 0:
            raise ValueError("hours must be >= 0")
        result = await self.session.execute(
            select(ReservationPolicy).where(ReservationPolicy.policy_type == kind.value)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = ReservationPolicy(policy_type=kind.value)
            self.session.add(row)
        row.hours_before = hours
        row.description = description
        await self.session.commit()
        self.invalidate()
        logger.info("Cutoff policy updated", policy_type=kind.value, hours=hours)
