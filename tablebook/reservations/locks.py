"""In-process locks serializing check-then-write per table slot"""

import asyncio
import weakref
from datetime import datetime
from typing import Tuple

from tablebook.utils.time import db_utc_naive


class SlotLocks:
    """
    One asyncio.Lock per (table, minute).

    Locks are held weakly and disappear once no coroutine is waiting on
    them. Cross-process safety comes from the active-slot unique index.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[Tuple[int, datetime], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def for_slot(self, table_id: int, at: datetime) -> asyncio.Lock:
        key = (int(table_id), db_utc_naive(at).replace(second=0, microsecond=0))
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
