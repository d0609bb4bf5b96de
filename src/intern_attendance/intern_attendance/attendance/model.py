from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceType, LocationStatus


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    accuracy: float = 0.0

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "accuracy": self.accuracy}


@dataclass(frozen=True)
class AttendanceRecord:
    """One check-in or check-out event.

    ``user_name`` and ``division`` are copied from the profile at submission time
    and are not updated when the profile changes. ``timestamp`` is timezone-aware;
    ``work_date`` is its site-local calendar date.
    """

    attendance_id: str
    user_id: str
    user_name: str
    division: str
    timestamp: datetime
    work_date: date
    type: AttendanceType
    location: Location
    is_late: bool
    status: LocationStatus
    photo_url: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "division": self.division,
            "timestamp": self.timestamp.isoformat(),
            "workDate": self.work_date.isoformat(),
            "type": self.type.value,
            "photoUrl": self.photo_url,
            "location": self.location.to_dict(),
            "isLate": self.is_late,
            "status": self.status.value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        loc = data.get("location") or {}
        return cls(
            attendance_id=data["id"],
            user_id=data["userId"],
            user_name=data.get("userName") or "",
            division=data.get("division") or "",
            timestamp=datetime.fromisoformat(data["timestamp"]),
            work_date=date.fromisoformat(data["workDate"]),
            type=AttendanceType(data["type"]),
            photo_url=data.get("photoUrl"),
            location=Location(
                latitude=float(loc.get("latitude", 0.0)),
                longitude=float(loc.get("longitude", 0.0)),
                accuracy=float(loc.get("accuracy", 0.0)),
            ),
            is_late=bool(data.get("isLate")),
            status=LocationStatus(data.get("status", LocationStatus.VALID.value)),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class AttendanceSubmission:
    """Raw check-in/out request as received from the client."""

    timestamp: datetime
    type: AttendanceType
    photo: str
    location: Location
