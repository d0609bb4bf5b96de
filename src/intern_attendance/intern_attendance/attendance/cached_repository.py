from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, Optional, Sequence, TypeVar

from ..core.exceptions import StorageError
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """Rows of a read plus whether they came from the local snapshot."""

    items: Sequence[T]
    degraded: bool = False


class JsonFileCache:
    """Last-known attendance rows, keyed by id, in one JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[AttendanceRecord]:
        with self._lock:
            return [AttendanceRecord.from_dict(d) for d in self._read().values()]

    def merge(self, records: Sequence[AttendanceRecord]) -> None:
        if not records:
            return
        with self._lock:
            data = self._read()
            for record in records:
                data[record.attendance_id] = record.to_dict()
            self._write(data)

    def replace(self, records: Sequence[AttendanceRecord], scope: Callable[[AttendanceRecord], bool]) -> None:
        """Make ``records`` the whole cached content of ``scope``; rows gone from it are dropped."""

        with self._lock:
            data = {k: v for k, v in self._read().items() if not scope(AttendanceRecord.from_dict(v))}
            for record in records:
                data[record.attendance_id] = record.to_dict()
            self._write(data)

    def discard(self, attendance_ids: Iterable[str]) -> int:
        ids = set(attendance_ids)
        return self.discard_where(lambda r: r.attendance_id in ids)

    def discard_where(self, predicate: Callable[[AttendanceRecord], bool]) -> int:
        with self._lock:
            data = self._read()
            kept = {k: v for k, v in data.items() if not predicate(AttendanceRecord.from_dict(v))}
            removed = len(data) - len(kept)
            if removed:
                self._write(kept)
            return removed

    def _read(self) -> Dict[str, dict]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Attendance cache %s unreadable, starting empty: %s", self._path, e)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, data: Dict[str, dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self._path)


class FallbackAttendanceRepository:
    """Two-tier reads: MySQL first, the JSON snapshot when MySQL is unavailable.

    A successful primary read refreshes the snapshot: an unlimited read replaces
    every cached row in its scope, a limited one only adds or updates rows. A
    primary read that raises StorageError is logged and answered from the
    snapshot with ``degraded=True``.
    Writes and maintenance queries always go to the primary.
    """

    def __init__(self, primary: AttendanceRepository, cache: JsonFileCache):
        self.primary = primary
        self.cache = cache

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        return self.primary.add(record)

    def list_for_user_on(self, user_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        return self.primary.list_for_user_on(user_id, work_date)

    def list_older_than(self, cutoff: datetime, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        return self.primary.list_older_than(cutoff, limit=limit, offset=offset)

    def archive(self, attendance_ids: Sequence[str]) -> int:
        moved = self.primary.archive(attendance_ids)
        try:
            self.cache.discard(attendance_ids)
        except OSError as e:
            logger.warning("Could not drop archived rows from attendance cache %s: %s", self.cache.path, e)
        return moved

    def forget_user(self, user_id: str) -> int:
        """Drop a deleted user's rows from the snapshot (MySQL cascades the table itself)."""
        try:
            return self.cache.discard_where(lambda r: r.user_id == user_id)
        except OSError as e:
            logger.warning("Could not drop rows of user %s from attendance cache: %s", user_id, e)
            return 0

    def list_by_dates(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> ReadResult[AttendanceRecord]:
        def matches(r: AttendanceRecord) -> bool:
            if user_id is not None and r.user_id != user_id:
                return False
            return start_date <= r.work_date <= end_date

        return self._read(
            "list_by_dates",
            lambda: self.primary.list_by_dates(start_date=start_date, end_date=end_date, user_id=user_id),
            matches,
        )

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> ReadResult[AttendanceRecord]:
        return self._read(
            "list_for_user",
            lambda: self.primary.list_for_user(user_id, limit),
            lambda r: r.user_id == user_id,
            limit,
        )

    def list_all(self, limit: Optional[int] = None) -> ReadResult[AttendanceRecord]:
        return self._read("list_all", lambda: self.primary.list_all(limit), lambda r: True, limit)

    def _read(
        self,
        name: str,
        primary_read: Callable[[], Sequence[AttendanceRecord]],
        matches: Callable[[AttendanceRecord], bool],
        limit: Optional[int] = None,
    ) -> ReadResult[AttendanceRecord]:
        try:
            items = list(primary_read())
        except StorageError as e:
            logger.warning("Attendance %s served from local cache: %s", name, e)
            cached = sorted((r for r in self.cache.load() if matches(r)), key=lambda r: r.timestamp, reverse=True)
            if limit is not None:
                cached = cached[:limit]
            return ReadResult(items=cached, degraded=True)

        try:
            if limit is None:
                self.cache.replace(items, matches)
            else:
                self.cache.merge(items)
        except OSError as e:
            logger.warning("Could not refresh attendance cache %s: %s", self.cache.path, e)
        return ReadResult(items=items, degraded=False)
