"""Read view and admin write path for dining tables"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tablebook.models.reservation import Reservation, ACTIVE_STATUSES
from tablebook.models.table import DiningTable
from tablebook.reservations.types import TableId

logger = structlog.get_logger()


class InvalidTable(ValueError):
    """A table write would break a catalog invariant"""


class TableCatalog:
    """Tables, their capacity and pricing"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, table_id: TableId) -> Optional[DiningTable]:
        return await self.session.get(DiningTable, table_id)

    async def list(self) -> List[DiningTable]:
        """All tables ordered by zone, then table number"""
        result = await self.session.execute(
            select(DiningTable).order_by(DiningTable.zone, DiningTable.table_number)
        )
        return list(result.scalars().all())

    async def capacity(self, table_id: TableId) -> Optional[int]:
        table = await self.get(table_id)
        return table.capacity if table else None

    async def price(self, table_id: TableId) -> Optional[Decimal]:
        """Base price plus surcharge"""
        table = await self.get(table_id)
        return table.total_price if table else None

    async def add(
        self,
        table_number: str,
        capacity: int,
        zone: str,
        base_price: Decimal,
        surcharge: Decimal = Decimal("0.00"),
    ) -> DiningTable:
        """Create a table (admin only)"""
        if capacity <= 0:
            raise InvalidTable("Capacity must be greater than 0.")
        if base_price < 0 or surcharge < 0:
            raise InvalidTable("Pricing values must be >= 0.")

        existing = await self.session.execute(
            select(func.count(DiningTable.id)).where(DiningTable.table_number == table_number)
        )
        if existing.scalar() > 0:
            raise InvalidTable(f"Table number {table_number} already exists.")

        table = DiningTable(
            table_number=table_number,
            capacity=capacity,
            zone=zone,
            base_price=base_price,
            surcharge=surcharge,
        )
        self.session.add(table)
        await self.session.commit()
        await self.session.refresh(table)

        logger.info("Table added", table_id=table.id, table_number=table_number)
        return table

    async def delete(self, table_id: TableId) -> bool:
        """Remove a table that no active reservation points at"""
        table = await self.get(table_id)
        if table is None:
            return False

        active = await self.session.execute(
            select(func.count(Reservation.id)).where(
                Reservation.table_id == table_id,
                Reservation.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        )
        if active.scalar() > 0:
            raise InvalidTable("Table has active reservations.")

        await self.session.delete(table)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise InvalidTable("Table is referenced by past reservations.") from e

        logger.info("Table deleted", table_id=table_id)
        return True
