"""Archive attendance rows older than CLEANUP_YEARS into ``attendance_archive``.

Run ``scripts/backup.py`` first. ``--dry-run`` (or DRY_RUN=1) only reports what
would be moved.
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

from src.intern_attendance.intern_attendance.container import build_container
from src.intern_attendance.intern_attendance.core.exceptions import DomainError
from src.intern_attendance.intern_attendance.core.logging_setup import configure_logging


def main(argv: list[str] | None = None) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", default=env_flag("DRY_RUN"))
    parser.add_argument("--years", type=int, default=settings.CLEANUP_YEARS)
    parser.add_argument("--batch-size", type=int, default=settings.CLEANUP_BATCH_SIZE)
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    container = build_container(
        db_config=settings.DB_CONFIG,
        site_timezone=settings.SITE_TIMEZONE,
        storage_dir=settings.STORAGE_DIR,
        cache_path=settings.FALLBACK_CACHE_PATH,
        cleanup_batch_size=args.batch_size,
    )

    try:
        report = container.archive_service.run(years=args.years, dry_run=args.dry_run)
    except DomainError as e:
        raise SystemExit(f"Cleanup gagal: {e}")

    print(
        f"OK: found={report.found} moved={report.moved} batches={report.batches} "
        f"cutoff={report.cutoff.isoformat()}{' [dry run]' if report.dry_run else ''}"
    )


if __name__ == "__main__":
    main()
