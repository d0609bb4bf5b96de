from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide(self, *, local_time: datetime, threshold: tuple[int, int]) -> StatusDecision:
        hour, minute = threshold
        minutes_late = (local_time.hour * 60 + local_time.minute) - (hour * 60 + minute)
        return StatusDecision(is_late=True, note=f"Terlambat {minutes_late} menit")
