from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """On-time check-in, or any check-out."""

    def decide(self, *, local_time: datetime, threshold: tuple[int, int]) -> StatusDecision:
        return StatusDecision(is_late=False)
