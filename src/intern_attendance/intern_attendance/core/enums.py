from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization checks."""

    INTERN = "intern"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"

    @property
    def is_admin(self) -> bool:
        return self in {Role.ADMIN, Role.SUPER_ADMIN}


class AttendanceType(str, Enum):
    IN = "in"
    OUT = "out"


class LocationStatus(str, Enum):
    """Geofence verdict stored with each attendance record."""

    VALID = "valid"
    INVALID = "invalid"
    PENDING = "pending"


class LeaveType(str, Enum):
    SICK = "sakit"
    PERMISSION = "izin"


class LeaveStatus(str, Enum):
    """Leave lifecycle: PENDING -> APPROVED | REJECTED (terminal)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DayStatus(str, Enum):
    """Per-day label used by the monthly recap."""

    PRESENT = "present"
    LATE = "late"
    LEAVE = "leave"
    ALPHA = "alpha"
    WEEKEND = "weekend"
