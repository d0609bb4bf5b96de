from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import AttendanceType, LocationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import AttendanceRecord, Location
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, user_name, division, recorded_at, work_date, type,
    photo_url, latitude, longitude, accuracy, is_late, status, notes
"""


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=r["attendance_id"],
        user_id=r["user_id"],
        user_name=r["user_name"],
        division=r["division"],
        timestamp=from_utc_naive(r["recorded_at"]),
        work_date=r["work_date"],
        type=AttendanceType(r["type"]),
        photo_url=r.get("photo_url"),
        location=Location(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            accuracy=float(r.get("accuracy") or 0.0),
        ),
        is_late=bool(r["is_late"]),
        status=LocationStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.attendance_id,
                    record.user_id,
                    record.user_name,
                    record.division,
                    to_utc_naive(record.timestamp),
                    record.work_date,
                    record.type.value,
                    record.photo_url,
                    record.location.latitude,
                    record.location.longitude,
                    record.location.accuracy,
                    int(record.is_late),
                    record.status.value,
                    record.notes,
                ),
            )
        return record

    def list_for_user_on(self, user_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                ORDER BY recorded_at ASC
                """,
                (user_id, work_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_by_dates(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(user_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY recorded_at DESC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s ORDER BY recorded_at DESC"
        params: list[object] = [user_id]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_all(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM attendance_records ORDER BY recorded_at DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_older_than(self, cutoff: datetime, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE recorded_at < %s
                ORDER BY recorded_at ASC, attendance_id ASC
                LIMIT %s OFFSET %s
                """,
                (to_utc_naive(cutoff), int(limit), int(offset)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def archive(self, attendance_ids: Sequence[str]) -> int:
        ids = list(attendance_ids)
        if not ids:
            return 0
        placeholders = in_clause(ids)
        # Copy + delete in one transaction: a failure leaves both tables untouched.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT IGNORE INTO attendance_archive({_COLUMNS})
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_id IN ({placeholders})
                """,
                tuple(ids),
            )
            cur.execute(
                f"DELETE FROM attendance_records WHERE attendance_id IN ({placeholders})",
                tuple(ids),
            )
            return int(cur.rowcount)
