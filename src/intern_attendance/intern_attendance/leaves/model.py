from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Sick (``sakit``) or permission (``izin``) leave over an inclusive date range.

    ``user_name`` and ``division`` are the requester's profile values at submission.
    """

    request_id: str
    user_id: str
    user_name: str
    division: str
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    request_date: datetime
    attachment_url: Optional[str] = None
    rejection_reason: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "division": self.division,
            "type": self.type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "reason": self.reason,
            "attachmentUrl": self.attachment_url,
            "status": self.status.value,
            "requestDate": self.request_date.isoformat(),
            "rejectionReason": self.rejection_reason,
        }
