from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..attendance.cached_repository import FallbackAttendanceRepository
from ..attendance.repository import AttendanceRepository
from ..core.constants import DEFAULT_CLEANUP_BATCH_SIZE
from ..core.exceptions import StorageError, ValidationError
from ..storage.photo_storage import PhotoStorage, StoredObject

logger = logging.getLogger(__name__)

EPOCH_MS_SUFFIX_RE = re.compile(r"_(\d+)\.[a-zA-Z]+$")
SAMPLE_SIZE = 10


def cutoff_for(years: int, now: datetime) -> datetime:
    if int(years) < 1:
        raise ValidationError("CLEANUP_YEARS minimal 1")
    return now - timedelta(days=365 * int(years))


@dataclass(frozen=True)
class ArchiveReport:
    cutoff: datetime
    dry_run: bool
    found: int
    moved: int
    batches: int


@dataclass(frozen=True)
class CleanupReport:
    bucket: str
    cutoff: datetime
    dry_run: bool
    scanned: int
    found: int
    deleted: int
    skipped: int


class ArchiveService:
    """Move attendance rows older than N years into ``attendance_archive`` in batches.

    A dry run pages through the same rows with an advancing offset and writes nothing.
    """

    def __init__(
        self,
        attendance: AttendanceRepository | FallbackAttendanceRepository,
        *,
        batch_size: int = DEFAULT_CLEANUP_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValidationError("Batch size minimal 1")
        self._attendance = attendance
        self._batch_size = int(batch_size)

    def run(self, *, years: int, dry_run: bool = False, now: datetime | None = None) -> ArchiveReport:
        now = now or datetime.now(timezone.utc)
        cutoff = cutoff_for(years, now)
        logger.info(
            "Attendance archive: records older than %s year(s) (before %s)%s",
            years,
            cutoff.isoformat(),
            " [dry run]" if dry_run else "",
        )

        found = moved = batches = offset = 0
        while True:
            # Moved rows leave the table, so a real run always reads from offset 0.
            batch = self._attendance.list_older_than(cutoff, limit=self._batch_size, offset=offset if dry_run else 0)
            if not batch:
                break

            batches += 1
            found += len(batch)
            ids = [r.attendance_id for r in batch]

            if dry_run:
                logger.info("Dry run: would move %d rows (sample ids: %s)", len(ids), ", ".join(ids[:5]))
                offset += len(batch)
            else:
                n = self._attendance.archive(ids)
                if n == 0:
                    raise StorageError("Archive batch moved no rows; stopping to avoid an endless loop")
                moved += n
                logger.info("Moved batch: %d rows (total moved: %d)", n, moved)

            if len(batch) < self._batch_size:
                break

        logger.info("Attendance archive done: found=%d moved=%d", found, moved)
        return ArchiveReport(cutoff=cutoff, dry_run=dry_run, found=found, moved=moved, batches=batches)


def object_timestamp(obj: StoredObject) -> Optional[datetime]:
    """Epoch-ms suffix of the key, else the stored modification time."""

    match = EPOCH_MS_SUFFIX_RE.search(obj.key)
    if match:
        return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
    return obj.modified_at


class PhotoCleanupService:
    """Delete stored photos older than N years, page by page (recursive listing)."""

    def __init__(self, storage: PhotoStorage, *, batch_size: int = DEFAULT_CLEANUP_BATCH_SIZE):
        if batch_size < 1:
            raise ValidationError("Batch size minimal 1")
        self._storage = storage
        self._batch_size = int(batch_size)

    def run(self, *, bucket: str, years: int, dry_run: bool = False, now: datetime | None = None) -> CleanupReport:
        now = now or datetime.now(timezone.utc)
        cutoff = cutoff_for(years, now)
        logger.info(
            "Storage cleanup for bucket '%s': objects older than %s year(s)%s",
            bucket,
            years,
            " [dry run]" if dry_run else "",
        )

        scanned = found = deleted = skipped = offset = 0
        while True:
            page = self._storage.list(bucket, limit=self._batch_size, offset=offset)
            if not page:
                break
            scanned += len(page)

            to_delete = []
            for obj in page:
                ts = object_timestamp(obj)
                if ts is None:
                    logger.warning("Could not determine timestamp for object, skipping: %s", obj.key)
                    skipped += 1
                    continue
                if ts < cutoff:
                    to_delete.append(obj.key)

            removed = 0
            if to_delete:
                found += len(to_delete)
                if dry_run:
                    logger.info(
                        "Dry run: would delete %d objects (sample: %s)",
                        len(to_delete),
                        ", ".join(to_delete[:SAMPLE_SIZE]),
                    )
                else:
                    removed = self._storage.remove(bucket, to_delete)
                    deleted += removed
                    logger.info("Deleted %d objects (total deleted: %d)", removed, deleted)

            if len(page) < self._batch_size:
                break
            # Deleted keys no longer occupy list positions.
            offset += len(page) - removed

        logger.info("Storage cleanup done: scanned=%d found=%d deleted=%d skipped=%d", scanned, found, deleted, skipped)
        return CleanupReport(
            bucket=bucket,
            cutoff=cutoff,
            dry_run=dry_run,
            scanned=scanned,
            found=found,
            deleted=deleted,
            skipped=skipped,
        )
