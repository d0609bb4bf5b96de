from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import to_site
from ..core.enums import AttendanceType
from ..users.model import User
from .model import AttendanceRecord

ATTENDANCE_HEADERS = ["Waktu", "Nama", "Divisi", "Tipe", "Status", "Latitude", "Longitude", "Terlambat"]
USER_SUMMARY_HEADERS = [
    "ID",
    "Nama Lengkap",
    "Username",
    "Divisi",
    "Role",
    "Total Hadir (Kali)",
    "Total Terlambat (Kali)",
    "Terakhir Absen",
]


def write_csv(headers: Sequence[str], rows: Iterable[dict]) -> bytes:
    """Text cells are always quoted; numbers are written bare. UTF-8 with BOM for Excel."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(headers), quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def attendance_csv(records: Sequence[AttendanceRecord], tz: ZoneInfo) -> bytes:
    return write_csv(
        ATTENDANCE_HEADERS,
        (
            {
                "Waktu": to_site(r.timestamp, tz).strftime("%Y-%m-%d %H:%M:%S"),
                "Nama": r.user_name,
                "Divisi": r.division,
                "Tipe": r.type.value.upper(),
                "Status": r.status.value.upper(),
                "Latitude": r.location.latitude,
                "Longitude": r.location.longitude,
                "Terlambat": "YA" if r.is_late else "TIDAK",
            }
            for r in records
        ),
    )


def users_summary_csv(users: Sequence[User], records: Sequence[AttendanceRecord], tz: ZoneInfo) -> bytes:
    """One row per user: check-in count, late check-in count, last attendance time."""

    by_user: dict[str, list[AttendanceRecord]] = {}
    for r in records:
        by_user.setdefault(r.user_id, []).append(r)

    rows = []
    for u in users:
        own = by_user.get(u.user_id, [])
        check_ins = [r for r in own if r.type == AttendanceType.IN]
        last_seen = "-"
        if own:
            latest = max(own, key=lambda r: r.timestamp)
            last_seen = to_site(latest.timestamp, tz).strftime("%Y-%m-%d %H:%M:%S")
        rows.append(
            {
                "ID": u.user_id,
                "Nama Lengkap": u.name,
                "Username": u.username,
                "Divisi": u.division_or_default,
                "Role": u.role.value,
                "Total Hadir (Kali)": len(check_ins),
                "Total Terlambat (Kali)": sum(1 for r in check_ins if r.is_late),
                "Terakhir Absen": last_seen,
            }
        )
    return write_csv(USER_SUMMARY_HEADERS, rows)
