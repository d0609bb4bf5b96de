"""In-memory repositories shared by the service and API tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from src.intern_attendance.intern_attendance.attendance.model import AttendanceRecord
from src.intern_attendance.intern_attendance.core.enums import LeaveStatus
from src.intern_attendance.intern_attendance.core.exceptions import ConflictError, StorageError
from src.intern_attendance.intern_attendance.leaves.model import LeaveRequest
from src.intern_attendance.intern_attendance.settings.model import SystemSettings
from src.intern_attendance.intern_attendance.users.model import AuthAccount, User


class InMemoryUsers:
    def __init__(self, users: Sequence[User] = ()):
        self.by_id: dict[str, User] = {u.user_id: u for u in users}
        self.fail_create = False

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.username == username), None)

    def list_all(self) -> Sequence[User]:
        return sorted(self.by_id.values(), key=lambda u: u.name)

    def create(self, user: User) -> None:
        if self.fail_create:
            raise StorageError("profile insert failed")
        self.by_id[user.user_id] = user

    def update(self, user: User) -> bool:
        self.by_id[user.user_id] = user
        return True

    def delete_by_id(self, user_id: str) -> bool:
        return self.by_id.pop(user_id, None) is not None

    def set_profile_photo(self, user_id: str, photo_url: str) -> bool:
        self.by_id[user_id] = replace(self.by_id[user_id], profile_photo_url=photo_url)
        return True


class InMemoryAccounts:
    def __init__(self, accounts: Sequence[AuthAccount] = ()):
        self.by_id: dict[str, AuthAccount] = {a.account_id: a for a in accounts}

    def get_by_id(self, account_id: str) -> Optional[AuthAccount]:
        return self.by_id.get(account_id)

    def get_by_email(self, email: str) -> Optional[AuthAccount]:
        return next((a for a in self.by_id.values() if a.email == email), None)

    def create(self, account: AuthAccount) -> None:
        self.by_id[account.account_id] = account

    def update(self, account_id: str, *, email: Optional[str] = None, password_hash: Optional[str] = None) -> bool:
        current = self.by_id[account_id]
        self.by_id[account_id] = AuthAccount(
            account_id=account_id,
            email=email or current.email,
            password_hash=password_hash or current.password_hash,
        )
        return True

    def delete(self, account_id: str) -> bool:
        return self.by_id.pop(account_id, None) is not None


class InMemorySettings:
    def __init__(self, settings: Optional[SystemSettings] = None):
        self.settings = settings
        self.saves = 0

    def get(self) -> Optional[SystemSettings]:
        return self.settings

    def save(self, settings: SystemSettings) -> None:
        self.settings = settings
        self.saves += 1


class InMemoryAttendance:
    """Primary attendance store; ``offline`` makes every read raise StorageError."""

    def __init__(self, records: Sequence[AttendanceRecord] = ()):
        self.records: list[AttendanceRecord] = list(records)
        self.archived: list[AttendanceRecord] = []
        self.offline = False
        self.fail_add = False

    def _check(self) -> None:
        if self.offline:
            raise StorageError("database unavailable")

    def _newest_first(self, items) -> list[AttendanceRecord]:
        return sorted(items, key=lambda r: r.timestamp, reverse=True)

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        if self.fail_add or any(
            r.user_id == record.user_id and r.work_date == record.work_date and r.type == record.type
            for r in self.records
        ):
            raise ConflictError("duplicate")
        self.records.append(record)
        return record

    def list_for_user_on(self, user_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        self._check()
        return [r for r in self.records if r.user_id == user_id and r.work_date == work_date]

    def list_by_dates(self, *, start_date: date, end_date: date, user_id: Optional[str] = None):
        self._check()
        return self._newest_first(
            r
            for r in self.records
            if start_date <= r.work_date <= end_date and (user_id is None or r.user_id == user_id)
        )

    def list_for_user(self, user_id: str, limit: Optional[int] = None):
        self._check()
        return self._newest_first(r for r in self.records if r.user_id == user_id)[:limit]

    def list_all(self, limit: Optional[int] = None):
        self._check()
        return self._newest_first(self.records)[:limit]

    def list_older_than(self, cutoff: datetime, *, limit: int, offset: int = 0):
        self._check()
        old = sorted((r for r in self.records if r.timestamp < cutoff), key=lambda r: r.timestamp)
        return old[offset : offset + limit]

    def archive(self, attendance_ids: Sequence[str]) -> int:
        ids = set(attendance_ids)
        moved = [r for r in self.records if r.attendance_id in ids]
        self.records = [r for r in self.records if r.attendance_id not in ids]
        self.archived.extend(moved)
        return len(moved)


class InMemoryLeaves:
    def __init__(self, leaves: Sequence[LeaveRequest] = ()):
        self.by_id: dict[str, LeaveRequest] = {leave.request_id: leave for leave in leaves}
        self.writes = 0

    def add(self, leave: LeaveRequest) -> None:
        self.by_id[leave.request_id] = leave
        self.writes += 1

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        return self.by_id.get(request_id)

    def list_for_user(self, user_id: str) -> Sequence[LeaveRequest]:
        items = [leave for leave in self.by_id.values() if leave.user_id == user_id]
        return sorted(items, key=lambda leave: leave.request_date, reverse=True)

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        items = [leave for leave in self.by_id.values() if status is None or leave.status == status]
        return sorted(items, key=lambda leave: leave.request_date, reverse=True)

    def list_overlapping(self, *, start_date: date, end_date: date, statuses, user_id: Optional[str] = None):
        items = [
            leave
            for leave in self.by_id.values()
            if leave.status in statuses
            and leave.overlaps(start_date, end_date)
            and (user_id is None or leave.user_id == user_id)
        ]
        return sorted(items, key=lambda leave: (leave.start_date, leave.request_date))

    def update_pending(self, leave: LeaveRequest) -> bool:
        current = self.by_id.get(leave.request_id)
        if not current or current.status != LeaveStatus.PENDING:
            return False
        self.by_id[leave.request_id] = leave
        self.writes += 1
        return True

    def decide(self, request_id: str, *, status: LeaveStatus, rejection_reason: Optional[str] = None) -> bool:
        current = self.by_id.get(request_id)
        if not current or current.status != LeaveStatus.PENDING:
            return False
        self.by_id[request_id] = replace(current, status=status, rejection_reason=rejection_reason)
        self.writes += 1
        return True

    def count_by_status(self, status: LeaveStatus) -> int:
        return sum(1 for leave in self.by_id.values() if leave.status == status)


def attendance_record(
    attendance_id: str,
    user_id: str,
    timestamp: datetime,
    type,
    *,
    is_late: bool = False,
    tz=None,
) -> AttendanceRecord:
    """Record at a site-local ``timestamp`` with a valid location."""
    from src.intern_attendance.intern_attendance.attendance.model import Location
    from src.intern_attendance.intern_attendance.core.enums import LocationStatus

    return AttendanceRecord(
        attendance_id=attendance_id,
        user_id=user_id,
        user_name=user_id.title(),
        division="Umum",
        timestamp=timestamp,
        work_date=(timestamp.astimezone(tz) if tz else timestamp).date(),
        type=type,
        location=Location(latitude=-5.16, longitude=119.41),
        is_late=is_late,
        status=LocationStatus.VALID,
    )
