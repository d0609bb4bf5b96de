from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import DayStatus, LeaveType
from ..users.model import User


@dataclass(frozen=True)
class DailyRoll:
    """Today's attendance rows and approved leaves, feeding the dashboard and the daily summary."""

    work_date: date
    interns: Sequence[User]
    records: Sequence[AttendanceRecord]
    on_leave_ids: frozenset[str]
    degraded: bool = False

    @property
    def present_ids(self) -> set[str]:
        return {r.user_id for r in self.records}

    @property
    def absent(self) -> list[User]:
        """Interns with no record today and no approved leave covering today."""
        present = self.present_ids
        return [u for u in self.interns if u.user_id not in present and u.user_id not in self.on_leave_ids]


@dataclass(frozen=True)
class DashboardStats:
    total_interns: int
    present_today: int
    late_today: int
    on_leave_today: int
    alpa_today: int
    # in-count minus out-count; negative values are reported as-is
    active_now: int
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "totalInterns": self.total_interns,
            "presentToday": self.present_today,
            "lateToday": self.late_today,
            "onLeaveToday": self.on_leave_today,
            "alpaToday": self.alpa_today,
            "activeNow": self.active_now,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class WeeklyStats:
    """One day of the 7-day chart."""

    day_name: str
    full_date: str
    present: int
    late: int

    def to_dict(self) -> dict:
        return {"date": self.day_name, "fullDate": self.full_date, "present": self.present, "late": self.late}


@dataclass(frozen=True)
class UserStats:
    present: int
    late: int
    on_leave: int
    degraded: bool = False

    def to_dict(self) -> dict:
        return {"present": self.present, "late": self.late, "onLeave": self.on_leave, "degraded": self.degraded}


@dataclass(frozen=True)
class MonthlyRecapDetail:
    date: str
    day_name: str
    status: DayStatus
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    leave_type: Optional[LeaveType] = None
    leave_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "dayName": self.day_name,
            "status": self.status.value,
            "checkInTime": self.check_in_time,
            "checkOutTime": self.check_out_time,
            "leaveType": self.leave_type.value if self.leave_type else None,
            "leaveReason": self.leave_reason,
        }


@dataclass(frozen=True)
class MonthlyRecapData:
    month: int
    year: int
    total_work_days: int = 0
    total_present: int = 0
    total_late: int = 0
    total_on_leave: int = 0
    total_alpha: int = 0
    attendance_percentage: int = 0
    details: list[MonthlyRecapDetail] = field(default_factory=list)
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "totalWorkDays": self.total_work_days,
            "totalPresent": self.total_present,
            "totalLate": self.total_late,
            "totalOnLeave": self.total_on_leave,
            "totalAlpha": self.total_alpha,
            "attendancePercentage": self.attendance_percentage,
            "details": [d.to_dict() for d in self.details],
            "degraded": self.degraded,
        }
