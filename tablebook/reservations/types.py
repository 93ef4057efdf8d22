"""Identifier types, actors and enums shared by the reservation core"""

import enum
from dataclasses import dataclass
from typing import NewType, Optional

ReservationId = NewType("ReservationId", int)
TableId = NewType("TableId", int)
CustomerId = NewType("CustomerId", int)
ReferenceId = NewType("ReferenceId", str)


class Role(str, enum.Enum):
    """Caller roles"""
    CUSTOMER = "customer"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"


ROLE_HIERARCHY = {
    Role.CUSTOMER: 0,
    Role.STAFF: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}


class CutoffKind(str, enum.Enum):
    """Policy rows that bound how late a guest may change a booking"""
    CANCELLATION = "cancellation"
    MODIFICATION = "modification"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a service operation"""
    id: int
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.STAFF, Role.MANAGER, Role.ADMIN)

    @property
    def customer_id(self) -> Optional[CustomerId]:
        if self.role == Role.CUSTOMER:
            return CustomerId(self.id)
        return None

    def has_permission(self, required_role: Role) -> bool:
        """Check if actor has at least the required role level"""
        return ROLE_HIERARCHY[self.role] >= ROLE_HIERARCHY[required_role]

    def may_access(self, owner_id: Optional[int]) -> bool:
        """Staff see every reservation; customers only their own."""
        if self.role == Role.CUSTOMER:
            return owner_id is not None and owner_id == self.id
        return True
