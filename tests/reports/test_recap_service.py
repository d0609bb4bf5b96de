from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

import pytest

from src.intern_attendance.intern_attendance.attendance.cached_repository import (
    FallbackAttendanceRepository,
    JsonFileCache,
)
from src.intern_attendance.intern_attendance.common.datetime_utils import iter_days
from src.intern_attendance.intern_attendance.core.enums import AttendanceType, DayStatus, LeaveStatus, LeaveType, Role
from src.intern_attendance.intern_attendance.core.exceptions import ValidationError
from src.intern_attendance.intern_attendance.leaves.model import LeaveRequest
from src.intern_attendance.intern_attendance.reports.export import recap_csv
from src.intern_attendance.intern_attendance.reports.service import RecapService, attendance_percentage
from src.intern_attendance.intern_attendance.users.model import User
from tests.fakes import InMemoryAttendance, InMemoryLeaves, InMemoryUsers, attendance_record

LEAVE_DAYS = {date(2026, 6, 10), date(2026, 6, 11)}
ABSENT_DAYS = {date(2026, 6, 17), date(2026, 6, 18)}
LATE_DAY = date(2026, 6, 2)


def _leave(request_id, user_id, start, end, status, *, requested=datetime(2026, 6, 1, 9, 0)):
    return LeaveRequest(
        request_id=request_id,
        user_id=user_id,
        user_name=user_id,
        division="Umum",
        type=LeaveType.PERMISSION,
        start_date=start,
        end_date=end,
        reason="Urusan keluarga",
        status=status,
        request_date=requested,
    )


def _june_records(tz):
    records = []
    for day in iter_days(date(2026, 6, 1), date(2026, 6, 30)):
        if day.weekday() >= 5 or day in LEAVE_DAYS or day in ABSENT_DAYS:
            continue
        late = day == LATE_DAY
        check_in = datetime.combine(day, time(8, 0) if late else time(7, 30), tzinfo=tz)
        records.append(attendance_record(f"in-{day}", "u1", check_in, AttendanceType.IN, is_late=late))
        if day != date(2026, 6, 30):
            check_out = datetime.combine(day, time(16, 5), tzinfo=tz)
            records.append(attendance_record(f"out-{day}", "u1", check_out, AttendanceType.OUT))
    # Weekend check-in and a check-out on a leave day are ignored by the recap.
    records.append(attendance_record("in-sat", "u1", datetime(2026, 6, 6, 9, 0, tzinfo=tz), AttendanceType.IN))
    records.append(attendance_record("out-leave", "u1", datetime(2026, 6, 10, 16, 0, tzinfo=tz), AttendanceType.OUT))
    return records


@pytest.fixture
def users():
    return InMemoryUsers(
        [
            User(user_id="u1", name="Ahmad", username="ahmad", role=Role.INTERN),
            User(user_id="u2", name="Budi", username="budi", role=Role.INTERN),
            User(user_id="u3", name="Citra", username="citra", role=Role.INTERN),
            User(user_id="admin", name="Admin", username="admin", role=Role.ADMIN),
        ]
    )


def _service(records, leaves, users, tmp_path, tz, primary=None):
    primary = primary or InMemoryAttendance(records)
    repo = FallbackAttendanceRepository(primary, JsonFileCache(tmp_path / "cache.json"))
    return RecapService(repo, InMemoryLeaves(leaves), users, tz=tz)


def test_june_recap_counts_and_percentage(users, tmp_path, tz, fixed_now):
    leaves = [
        _leave("l1", "u1", date(2026, 6, 10), date(2026, 6, 11), LeaveStatus.APPROVED),
        # pending and rejected requests do not excuse absence
        _leave("l2", "u1", date(2026, 6, 17), date(2026, 6, 17), LeaveStatus.PENDING),
        _leave("l3", "u1", date(2026, 6, 18), date(2026, 6, 18), LeaveStatus.REJECTED),
    ]
    service = _service(_june_records(tz), leaves, users, tmp_path, tz)

    recap = service.monthly_recap("u1", 6, 2026, now=fixed_now)

    assert recap.total_work_days == 22
    assert recap.total_present == 17
    assert recap.total_late == 1
    assert recap.total_on_leave == 2
    assert recap.total_alpha == 2
    assert recap.attendance_percentage == 91
    assert recap.total_present + recap.total_late + recap.total_on_leave + recap.total_alpha == recap.total_work_days
    assert len(recap.details) == 30
    assert recap.degraded is False


def test_june_recap_details(users, tmp_path, tz, fixed_now):
    leaves = [_leave("l1", "u1", date(2026, 6, 10), date(2026, 6, 11), LeaveStatus.APPROVED)]
    service = _service(_june_records(tz), leaves, users, tmp_path, tz)

    details = {d.date: d for d in service.monthly_recap("u1", 6, 2026, now=fixed_now).details}

    assert details["2026-06-01"].status == DayStatus.PRESENT
    assert details["2026-06-01"].day_name == "Senin"
    assert (details["2026-06-01"].check_in_time, details["2026-06-01"].check_out_time) == ("07:30", "16:05")
    assert details["2026-06-02"].status == DayStatus.LATE
    assert details["2026-06-06"].status == DayStatus.WEEKEND
    assert details["2026-06-06"].check_in_time is None
    assert details["2026-06-10"].status == DayStatus.LEAVE
    assert details["2026-06-10"].leave_type == LeaveType.PERMISSION
    assert details["2026-06-10"].check_out_time is None
    assert details["2026-06-17"].status == DayStatus.ALPHA
    assert details["2026-06-30"].check_out_time is None


def test_current_month_stops_at_today(users, tmp_path, tz):
    service = _service(_june_records(tz), [], users, tmp_path, tz)

    recap = service.monthly_recap("u1", 6, 2026, now=datetime(2026, 6, 12, 9, 0, tzinfo=tz))

    assert len(recap.details) == 12
    assert recap.total_work_days == 10


def test_future_month_is_empty(users, tmp_path, tz, fixed_now):
    service = _service(_june_records(tz), [], users, tmp_path, tz)

    recap = service.monthly_recap("u1", 7, 2026, now=fixed_now)

    assert recap.details == []
    assert recap.total_work_days == 0
    assert recap.attendance_percentage == 0


def test_earliest_duplicate_check_in_wins(users, tmp_path, tz, fixed_now):
    records = [
        attendance_record("late", "u1", datetime(2026, 6, 1, 9, 0, tzinfo=tz), AttendanceType.IN, is_late=True),
        attendance_record("early", "u1", datetime(2026, 6, 1, 7, 10, tzinfo=tz), AttendanceType.IN),
    ]
    service = _service(records, [], users, tmp_path, tz)

    first = service.monthly_recap("u1", 6, 2026, now=fixed_now).details[0]

    assert first.status == DayStatus.PRESENT
    assert first.check_in_time == "07:10"


@pytest.mark.parametrize("month, year", [(0, 2026), (13, 2026), (6, 1999), (6, 10000)])
def test_invalid_month_or_year_raises(users, tmp_path, tz, fixed_now, month, year):
    service = _service([], [], users, tmp_path, tz)

    with pytest.raises(ValidationError):
        service.monthly_recap("u1", month, year, now=fixed_now)


@pytest.mark.parametrize(
    "attended, work_days, expected",
    [(20, 22, 91), (0, 22, 0), (22, 22, 100), (1, 8, 13), (1, 0, 0)],
)
def test_attendance_percentage_rounding(attended, work_days, expected):
    assert attendance_percentage(attended, work_days) == expected


def test_recap_csv_uses_indonesian_labels(users, tmp_path, tz, fixed_now):
    leaves = [_leave("l1", "u1", date(2026, 6, 10), date(2026, 6, 11), LeaveStatus.APPROVED)]
    service = _service(_june_records(tz), leaves, users, tmp_path, tz)

    lines = recap_csv(service.monthly_recap("u1", 6, 2026, now=fixed_now)).decode("utf-8-sig").split("\n")

    assert lines[0] == '"Tanggal","Hari","Status","Jam Masuk","Jam Pulang","Jenis Izin","Keterangan"'
    assert lines[1] == '"2026-06-01","Senin","Hadir","07:30","16:05","-",""'
    assert lines[10] == '"2026-06-10","Rabu","Izin","-","-","izin","Urusan keluarga"'


def test_dashboard_stats_for_today(users, tmp_path, tz, fixed_now):
    records = [
        attendance_record("a1", "u1", datetime(2026, 6, 30, 7, 50, tzinfo=tz), AttendanceType.IN, is_late=True),
        attendance_record("a2", "u1", datetime(2026, 6, 30, 9, 0, tzinfo=tz), AttendanceType.OUT),
        attendance_record("a3", "u2", datetime(2026, 6, 30, 7, 20, tzinfo=tz), AttendanceType.IN),
        attendance_record("old", "u3", datetime(2026, 6, 29, 7, 20, tzinfo=tz), AttendanceType.IN),
    ]
    leaves = [_leave("l1", "u3", date(2026, 6, 29), date(2026, 7, 1), LeaveStatus.APPROVED)]
    service = _service(records, leaves, users, tmp_path, tz)

    stats = service.dashboard_stats(now=fixed_now)

    assert stats.total_interns == 3
    assert stats.present_today == 2
    assert stats.late_today == 1
    assert stats.on_leave_today == 1
    assert stats.alpa_today == 0
    assert stats.active_now == 1


def test_weekly_stats_cover_last_seven_days(users, tmp_path, tz, fixed_now):
    records = [
        attendance_record("a1", "u1", datetime(2026, 6, 30, 7, 50, tzinfo=tz), AttendanceType.IN, is_late=True),
        attendance_record("a2", "u1", datetime(2026, 6, 30, 16, 0, tzinfo=tz), AttendanceType.OUT),
        attendance_record("a3", "u2", datetime(2026, 6, 24, 7, 20, tzinfo=tz), AttendanceType.IN),
        attendance_record("a4", "u2", datetime(2026, 6, 23, 7, 20, tzinfo=tz), AttendanceType.IN),
    ]
    service = _service(records, [], users, tmp_path, tz)

    result = service.weekly_stats(now=fixed_now)
    days = result.items

    assert [d.full_date for d in days] == [f"2026-06-{n}" for n in range(24, 31)]
    assert days[0].day_name == "Rab"
    assert (days[0].present, days[0].late) == (1, 0)
    assert (days[-1].present, days[-1].late) == (1, 1)
    assert sum(d.present for d in days) == 2


def test_user_stats_for_current_month(users, tmp_path, tz, fixed_now):
    records = [
        attendance_record("a1", "u1", datetime(2026, 6, 29, 7, 50, tzinfo=tz), AttendanceType.IN, is_late=True),
        attendance_record("a2", "u1", datetime(2026, 6, 29, 16, 0, tzinfo=tz), AttendanceType.OUT),
        attendance_record("a3", "u1", datetime(2026, 6, 30, 7, 20, tzinfo=tz), AttendanceType.IN),
        attendance_record("may", "u1", datetime(2026, 5, 29, 7, 20, tzinfo=tz), AttendanceType.IN),
    ]
    leaves = [_leave("l1", "u1", date(2026, 6, 15), date(2026, 6, 16), LeaveStatus.APPROVED)]
    service = _service(records, leaves, users, tmp_path, tz)

    stats = service.user_stats("u1", now=fixed_now)

    assert (stats.present, stats.late, stats.on_leave) == (2, 1, 1)


def test_recap_during_outage_is_flagged_degraded(users, tmp_path, tz, fixed_now):
    primary = InMemoryAttendance(_june_records(tz))
    service = _service([], [], users, tmp_path, tz, primary=primary)
    service.monthly_recap("u1", 6, 2026, now=fixed_now)

    primary.offline = True
    recap = service.monthly_recap("u1", 6, 2026, now=fixed_now)

    assert recap.degraded is True
    assert recap.total_present == 17


def test_active_now_is_reported_negative(users, tmp_path, tz, fixed_now):
    records = [
        attendance_record("a1", "u1", datetime(2026, 6, 30, 7, 30, tzinfo=tz), AttendanceType.IN),
        attendance_record("a2", "u1", datetime(2026, 6, 30, 9, 0, tzinfo=tz), AttendanceType.OUT),
        attendance_record("a3", "u2", datetime(2026, 6, 30, 9, 5, tzinfo=tz), AttendanceType.OUT),
        attendance_record("a4", "u3", datetime(2026, 6, 30, 9, 10, tzinfo=tz), AttendanceType.OUT),
    ]
    service = _service(records, [], users, tmp_path, tz)

    stats = service.dashboard_stats(now=fixed_now)

    assert stats.active_now == -2
    assert stats.present_today == 3


def _month_records(year, month, tz):
    records = []
    day = date(year, month, 1)
    while day.month == month:
        if day.day % 5 != 0:
            check_in = datetime.combine(day, time(8, 0) if day.day % 3 == 0 else time(7, 30), tzinfo=tz)
            records.append(
                attendance_record(f"in-{day}", "u1", check_in, AttendanceType.IN, is_late=day.day % 3 == 0)
            )
        day += timedelta(days=1)
    return records


@pytest.mark.parametrize(
    "year, month, today",
    [
        (2026, 5, date(2026, 6, 30)),  # finished month
        (2026, 6, date(2026, 6, 17)),  # mid-month weekday
        (2026, 2, date(2026, 2, 28)),  # starts on a Sunday, today a Saturday
        (2026, 3, date(2026, 3, 15)),  # starts on a Sunday, today a Sunday
        (2026, 8, date(2026, 8, 1)),  # today is the first day and a Saturday
    ],
)
def test_recap_totals_add_up_to_work_days(users, tmp_path, tz, year, month, today):
    leaves = [_leave("l1", "u1", date(year, month, 7), date(year, month, 8), LeaveStatus.APPROVED)]
    service = _service(_month_records(year, month, tz), leaves, users, tmp_path, tz)

    recap = service.monthly_recap("u1", month, year, now=datetime.combine(today, time(10, 0), tzinfo=tz))

    end = min(today, date(year, month, calendar.monthrange(year, month)[1]))
    elapsed = [date(year, month, 1) + timedelta(days=n) for n in range((end - date(year, month, 1)).days + 1)]
    weekdays = sum(1 for d in elapsed if d.weekday() < 5)

    assert len(recap.details) == len(elapsed)
    assert recap.total_work_days == weekdays
    assert recap.total_present + recap.total_late + recap.total_on_leave + recap.total_alpha == weekdays
    assert recap.attendance_percentage == attendance_percentage(
        recap.total_present + recap.total_late + recap.total_on_leave, weekdays
    )
