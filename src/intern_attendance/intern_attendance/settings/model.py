from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import (
    DEFAULT_CLOCK_OUT_FRI,
    DEFAULT_CLOCK_OUT_MON_THU,
    DEFAULT_LATE_THRESHOLD,
    DEFAULT_MAX_DISTANCE_METERS,
    DEFAULT_OFFICE_LAT,
    DEFAULT_OFFICE_LNG,
)


@dataclass(frozen=True)
class SystemSettings:
    """Single-row configuration: office geofence + working hours."""

    office_lat: float = DEFAULT_OFFICE_LAT
    office_lng: float = DEFAULT_OFFICE_LNG
    max_distance_meters: float = DEFAULT_MAX_DISTANCE_METERS
    late_threshold: str = DEFAULT_LATE_THRESHOLD
    clock_out_time_mon_thu: str = DEFAULT_CLOCK_OUT_MON_THU
    clock_out_time_fri: str = DEFAULT_CLOCK_OUT_FRI

    def clock_out_time_for(self, day: date) -> Optional[str]:
        """Scheduled clock-out for ``day``; None on weekends."""
        weekday = day.weekday()
        if weekday <= 3:
            return self.clock_out_time_mon_thu
        if weekday == 4:
            return self.clock_out_time_fri
        return None

    def to_dict(self) -> dict:
        return {
            "officeLat": self.office_lat,
            "officeLng": self.office_lng,
            "maxDistanceMeters": self.max_distance_meters,
            "lateThreshold": self.late_threshold,
            "clockOutTimeMonThu": self.clock_out_time_mon_thu,
            "clockOutTimeFri": self.clock_out_time_fri,
        }
