from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, user_id, user_name, division, leave_type, start_date, end_date,
    reason, attachment_url, status, rejection_reason, created_at
"""


def _row_to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=r["request_id"],
        user_id=r["user_id"],
        user_name=r["user_name"],
        division=r["division"],
        type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        attachment_url=r.get("attachment_url"),
        status=LeaveStatus(r["status"]),
        rejection_reason=r.get("rejection_reason"),
        request_date=from_utc_naive(r["created_at"]),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, leave: LeaveRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO leave_requests({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave.request_id,
                    leave.user_id,
                    leave.user_name,
                    leave.division,
                    leave.type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.reason,
                    leave.attachment_url,
                    leave.status.value,
                    leave.rejection_reason,
                    to_utc_naive(leave.request_date),
                ),
            )

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (request_id,))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_for_user(self, user_id: str) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE user_id=%s ORDER BY created_at DESC",
                (user_id,),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        sql = f"SELECT {_COLUMNS} FROM leave_requests"
        params: tuple = ()
        if status is not None:
            sql += " WHERE status=%s"
            params = (status.value,)
        sql += " ORDER BY created_at DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_leave(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Sequence[LeaveStatus],
        user_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        values = [s.value for s in statuses]
        if not values:
            return []
        clauses = ["start_date <= %s", "end_date >= %s", f"status IN ({in_clause(values)})"]
        params: list[object] = [end_date, start_date, *values]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(user_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {' AND '.join(clauses)}
                ORDER BY start_date ASC, created_at ASC
                """,
                tuple(params),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def update_pending(self, leave: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET leave_type=%s, start_date=%s, end_date=%s, reason=%s, attachment_url=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    leave.type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.reason,
                    leave.attachment_url,
                    leave.request_id,
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def decide(self, request_id: str, *, status: LeaveStatus, rejection_reason: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, rejection_reason, request_id, LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def count_by_status(self, status: LeaveStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM leave_requests WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
