from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import AttendanceType
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


def is_late(local_time: datetime, threshold: tuple[int, int]) -> bool:
    """Minute granularity: 07:40:59 is not late against 07:40, 07:41 is."""
    hour, minute = threshold
    return local_time.hour > hour or (local_time.hour == hour and local_time.minute > minute)


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_submission(
        self, *, type: AttendanceType, local_time: datetime, threshold: tuple[int, int]
    ) -> AttendanceStrategy:
        if type == AttendanceType.OUT:
            return OnTimeStrategy()
        if is_late(local_time, threshold):
            return LateStrategy()
        return OnTimeStrategy()
