from datetime import datetime

import pytest

from src.intern_attendance.intern_attendance.attendance.factory import AttendanceStrategyFactory, is_late
from src.intern_attendance.intern_attendance.attendance.strategies.late_strategy import LateStrategy
from src.intern_attendance.intern_attendance.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.intern_attendance.intern_attendance.core.enums import AttendanceType

THRESHOLD = (7, 40)


@pytest.mark.parametrize(
    "hour, minute, second, expected",
    [
        (7, 39, 0, False),
        (7, 40, 0, False),
        (7, 40, 59, False),
        (7, 41, 0, True),
        (8, 0, 0, True),
        (6, 59, 0, False),
    ],
)
def test_is_late_minute_granularity(hour, minute, second, expected):
    assert is_late(datetime(2026, 6, 1, hour, minute, second), THRESHOLD) is expected


def test_factory_checkin_on_time_at_threshold():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_submission(type=AttendanceType.IN, local_time=datetime(2026, 6, 1, 7, 40, 59), threshold=THRESHOLD)

    assert isinstance(strategy, OnTimeStrategy)


def test_factory_checkin_late_after_threshold():
    factory = AttendanceStrategyFactory()
    local_time = datetime(2026, 6, 1, 8, 0)
    strategy = factory.for_submission(type=AttendanceType.IN, local_time=local_time, threshold=THRESHOLD)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide(local_time=local_time, threshold=THRESHOLD)
    assert decision.is_late is True
    assert decision.note == "Terlambat 20 menit"


def test_factory_checkout_is_never_late():
    factory = AttendanceStrategyFactory()
    local_time = datetime(2026, 6, 1, 17, 30)
    strategy = factory.for_submission(type=AttendanceType.OUT, local_time=local_time, threshold=THRESHOLD)

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide(local_time=local_time, threshold=THRESHOLD).is_late is False
