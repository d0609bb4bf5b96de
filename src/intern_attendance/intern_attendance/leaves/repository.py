from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def add(self, leave: LeaveRequest) -> None:
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[LeaveRequest]:
        """Newest request first."""

        raise NotImplementedError

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Sequence[LeaveStatus],
        user_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        """Requests intersecting [start_date, end_date], ordered by start date then request date."""

        raise NotImplementedError

    def update_pending(self, leave: LeaveRequest) -> bool:
        """Overwrite the editable fields; only succeeds while the stored row is pending."""

        raise NotImplementedError

    def decide(self, request_id: str, *, status: LeaveStatus, rejection_reason: Optional[str] = None) -> bool:
        """pending -> approved/rejected; False when the row is not pending anymore."""

        raise NotImplementedError

    def count_by_status(self, status: LeaveStatus) -> int:
        raise NotImplementedError
