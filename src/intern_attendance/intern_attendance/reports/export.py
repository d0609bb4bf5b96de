from __future__ import annotations

from ..attendance.export import write_csv
from ..core.enums import DayStatus
from .model import MonthlyRecapData

RECAP_HEADERS = ["Tanggal", "Hari", "Status", "Jam Masuk", "Jam Pulang", "Jenis Izin", "Keterangan"]

STATUS_LABELS = {
    DayStatus.PRESENT: "Hadir",
    DayStatus.LATE: "Terlambat",
    DayStatus.LEAVE: "Izin",
    DayStatus.ALPHA: "Alpha",
    DayStatus.WEEKEND: "Libur",
}


def recap_csv(recap: MonthlyRecapData) -> bytes:
    return write_csv(
        RECAP_HEADERS,
        (
            {
                "Tanggal": d.date,
                "Hari": d.day_name,
                "Status": STATUS_LABELS[d.status],
                "Jam Masuk": d.check_in_time or "-",
                "Jam Pulang": d.check_out_time or "-",
                "Jenis Izin": d.leave_type.value if d.leave_type else "-",
                "Keterangan": d.leave_reason or "",
            }
            for d in recap.details
        ),
    )
