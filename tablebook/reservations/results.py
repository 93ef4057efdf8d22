"""Tagged results returned by the reservation service"""

import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    """Reasons a reservation operation can fail"""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    PAST_TIME = "past_time"
    OUTSIDE_HOURS = "outside_hours"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    UNKNOWN_TABLE = "unknown_table"
    TABLE_CONFLICT = "table_conflict"
    CUTOFF_PASSED = "cutoff_passed"
    NOT_MODIFIABLE = "not_modifiable"
    NOT_CANCELABLE = "not_cancelable"
    DUPLICATE_REFERENCE = "duplicate_reference"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an error kind, never both"""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: Optional[str] = None) -> "Result[T]":
        return cls(error=error, detail=detail)

    def unwrap(self) -> T:
        if self.error is not None:
            raise ValueError(f"result is an error: {self.error.value}")
        return self.value
