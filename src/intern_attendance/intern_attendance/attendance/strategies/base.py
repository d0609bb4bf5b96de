from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class StatusDecision:
    is_late: bool
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide whether a submission is late."""

    @abstractmethod
    def decide(self, *, local_time: datetime, threshold: tuple[int, int]) -> StatusDecision:
        raise NotImplementedError
