"""Table layout availability"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from tablebook.models.table import DiningTable
from tablebook.reservations.store import ReservationStore
from tablebook.reservations.table_catalog import TableCatalog
from tablebook.utils.time import to_minute


@dataclass(frozen=True)
class TableAvailability:
    table: DiningTable
    available: bool


class AvailabilityProjector:
    """Which tables are free at a given minute; always read fresh from the store"""

    def __init__(self, tables: TableCatalog, reservations: ReservationStore):
        self.tables = tables
        self.reservations = reservations

    async def project(
        self,
        instant: datetime,
        party_size: Optional[int] = None,
    ) -> List[TableAvailability]:
        at = to_minute(instant)
        projection = []
        for table in await self.tables.list():
            if party_size is not None and table.capacity < party_size:
                continue
            taken = await self.reservations.count_active_at(table.id, at)
            projection.append(TableAvailability(table=table, available=taken == 0))
        return projection
