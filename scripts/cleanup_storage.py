"""Delete stored photos older than CLEANUP_YEARS from one bucket.

``--dry-run`` (or DRY_RUN=1) only lists what would be deleted.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import env_flag, get_settings_module

from src.intern_attendance.intern_attendance.core.exceptions import DomainError
from src.intern_attendance.intern_attendance.core.logging_setup import configure_logging
from src.intern_attendance.intern_attendance.maintenance.service import PhotoCleanupService
from src.intern_attendance.intern_attendance.storage.photo_storage import FileSystemPhotoStorage


def main(argv: list[str] | None = None) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", default=env_flag("DRY_RUN"))
    parser.add_argument("--years", type=int, default=settings.CLEANUP_YEARS)
    parser.add_argument("--batch-size", type=int, default=settings.CLEANUP_BATCH_SIZE)
    parser.add_argument("--bucket", default=settings.CLEANUP_BUCKET)
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    # Storage only; no database connection needed.
    service = PhotoCleanupService(FileSystemPhotoStorage(settings.STORAGE_DIR), batch_size=args.batch_size)
    try:
        report = service.run(bucket=args.bucket, years=args.years, dry_run=args.dry_run)
    except DomainError as e:
        raise SystemExit(f"Cleanup gagal: {e}")

    print(
        f"OK: bucket={report.bucket} scanned={report.scanned} found={report.found} "
        f"deleted={report.deleted} skipped={report.skipped}{' [dry run]' if report.dry_run else ''}"
    )


if __name__ == "__main__":
    main()
