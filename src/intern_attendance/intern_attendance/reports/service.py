from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..attendance.cached_repository import FallbackAttendanceRepository, ReadResult
from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import format_hhmm, is_weekend, iter_days, last_day_of_month, now_local, to_site
from ..core.constants import DAY_NAMES, SHORT_DAY_NAMES, WEEKLY_DAYS
from ..core.enums import AttendanceType, DayStatus, LeaveStatus, Role
from ..core.exceptions import ValidationError
from ..leaves.model import LeaveRequest
from ..leaves.repository import LeaveRepository
from ..users.repository import UserRepository
from .model import DailyRoll, DashboardStats, MonthlyRecapData, MonthlyRecapDetail, UserStats, WeeklyStats


def attendance_percentage(attended: int, work_days: int) -> int:
    """round(100 * attended / work_days) with halves rounded up; 0 without work days."""
    if work_days <= 0:
        return 0
    return (200 * attended + work_days) // (2 * work_days)


def _earliest_by_day(records: Sequence[AttendanceRecord], type: AttendanceType) -> dict[date, AttendanceRecord]:
    # Duplicates per day/type are tolerated; the earliest timestamp wins.
    out: dict[date, AttendanceRecord] = {}
    for r in records:
        if r.type != type:
            continue
        seen = out.get(r.work_date)
        if seen is None or r.timestamp < seen.timestamp:
            out[r.work_date] = r
    return out


def _leave_on(day: date, leaves: Sequence[LeaveRequest]) -> Optional[LeaveRequest]:
    covering = [leave for leave in leaves if leave.covers(day)]
    if not covering:
        return None
    return min(covering, key=lambda leave: (leave.start_date, leave.request_date))


class RecapService:
    """Read-side rollups: monthly recap, dashboard, weekly chart, personal stats.

    Nothing here is persisted; every call recomputes from attendance and leaves.
    """

    def __init__(
        self,
        attendance: FallbackAttendanceRepository,
        leaves: LeaveRepository,
        users: UserRepository,
        *,
        tz: ZoneInfo,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._users = users
        self._tz = tz

    def _today(self, now: datetime | None) -> date:
        return to_site(now or now_local(self._tz), self._tz).date()

    def _approved(self, start: date, end: date, user_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_overlapping(
            start_date=start, end_date=end, statuses=(LeaveStatus.APPROVED,), user_id=user_id
        )

    def monthly_recap(self, user_id: str, month: int, year: int, *, now: datetime | None = None) -> MonthlyRecapData:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Bulan harus antara 1 dan 12")
        if not 2000 <= int(year) <= 9999:
            raise ValidationError("Tahun tidak valid")
        month, year = int(month), int(year)

        today = self._today(now)
        first = date(year, month, 1)
        if first > today:
            return MonthlyRecapData(month=month, year=year)
        end = min(today, last_day_of_month(year, month))

        result = self._attendance.list_by_dates(start_date=first, end_date=end, user_id=user_id)
        check_ins = _earliest_by_day(result.items, AttendanceType.IN)
        check_outs = _earliest_by_day(result.items, AttendanceType.OUT)
        leaves = self._approved(first, end, user_id)

        details: list[MonthlyRecapDetail] = []
        work_days = present = late = on_leave = alpha = 0

        for day in iter_days(first, end):
            day_name = DAY_NAMES[day.weekday()]
            if is_weekend(day):
                details.append(MonthlyRecapDetail(date=day.isoformat(), day_name=day_name, status=DayStatus.WEEKEND))
                continue

            work_days += 1

            leave = _leave_on(day, leaves)
            if leave:
                on_leave += 1
                details.append(
                    MonthlyRecapDetail(
                        date=day.isoformat(),
                        day_name=day_name,
                        status=DayStatus.LEAVE,
                        leave_type=leave.type,
                        leave_reason=leave.reason,
                    )
                )
                continue

            check_in = check_ins.get(day)
            if not check_in:
                alpha += 1
                details.append(MonthlyRecapDetail(date=day.isoformat(), day_name=day_name, status=DayStatus.ALPHA))
                continue

            if check_in.is_late:
                late += 1
                status = DayStatus.LATE
            else:
                present += 1
                status = DayStatus.PRESENT

            check_out = check_outs.get(day)
            details.append(
                MonthlyRecapDetail(
                    date=day.isoformat(),
                    day_name=day_name,
                    status=status,
                    check_in_time=format_hhmm(check_in.timestamp, self._tz),
                    check_out_time=format_hhmm(check_out.timestamp, self._tz) if check_out else None,
                )
            )

        return MonthlyRecapData(
            month=month,
            year=year,
            total_work_days=work_days,
            total_present=present,
            total_late=late,
            total_on_leave=on_leave,
            total_alpha=alpha,
            attendance_percentage=attendance_percentage(present + late + on_leave, work_days),
            details=details,
            degraded=result.degraded,
        )

    def daily_roll(self, *, now: datetime | None = None) -> DailyRoll:
        today = self._today(now)
        result = self._attendance.list_by_dates(start_date=today, end_date=today)
        return DailyRoll(
            work_date=today,
            interns=[u for u in self._users.list_all() if u.role == Role.INTERN],
            records=result.items,
            on_leave_ids=frozenset(leave.user_id for leave in self._approved(today, today)),
            degraded=result.degraded,
        )

    def dashboard_stats(self, *, now: datetime | None = None) -> DashboardStats:
        roll = self.daily_roll(now=now)
        ins = [r for r in roll.records if r.type == AttendanceType.IN]
        outs = [r for r in roll.records if r.type == AttendanceType.OUT]

        return DashboardStats(
            total_interns=len(roll.interns),
            present_today=len(roll.present_ids),
            late_today=sum(1 for r in ins if r.is_late),
            on_leave_today=len(roll.on_leave_ids),
            alpa_today=len(roll.absent),
            active_now=len(ins) - len(outs),
            degraded=roll.degraded,
        )

    def weekly_stats(self, *, now: datetime | None = None) -> ReadResult[WeeklyStats]:
        """Last 7 days, today included, oldest first."""

        today = self._today(now)
        start = today - timedelta(days=WEEKLY_DAYS - 1)
        result = self._attendance.list_by_dates(start_date=start, end_date=today)

        days = []
        for day in iter_days(start, today):
            records = [r for r in result.items if r.work_date == day]
            days.append(
                WeeklyStats(
                    day_name=SHORT_DAY_NAMES[day.weekday()],
                    full_date=day.isoformat(),
                    present=len({r.user_id for r in records}),
                    late=sum(1 for r in records if r.type == AttendanceType.IN and r.is_late),
                )
            )
        return ReadResult(items=days, degraded=result.degraded)

    def user_stats(self, user_id: str, *, now: datetime | None = None) -> UserStats:
        today = self._today(now)
        first = today.replace(day=1)
        result = self._attendance.list_by_dates(start_date=first, end_date=today, user_id=user_id)

        month_end = last_day_of_month(today.year, today.month)
        return UserStats(
            present=len({r.work_date for r in result.items}),
            late=sum(1 for r in result.items if r.type == AttendanceType.IN and r.is_late),
            on_leave=len(self._approved(first, month_end, user_id)),
            degraded=result.degraded,
        )
