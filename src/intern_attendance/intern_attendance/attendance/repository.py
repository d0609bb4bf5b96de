from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_user_on(self, user_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_dates(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records whose ``work_date`` is within [start_date, end_date], newest first."""

        raise NotImplementedError

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_older_than(self, cutoff: datetime, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        """Oldest first, for batch archival."""

        raise NotImplementedError

    def archive(self, attendance_ids: Sequence[str]) -> int:
        """Move records into the archive table; returns how many were moved."""

        raise NotImplementedError
