from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

from .attendance.cached_repository import FallbackAttendanceRepository, JsonFileCache
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_CLEANUP_BATCH_SIZE, DEFAULT_GEMINI_MODEL, DEFAULT_SITE_TIMEZONE
from .database.connection import DatabaseConnection, db_config_from_dict
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .maintenance.service import ArchiveService, PhotoCleanupService
from .reports.daily_summary import DailySummaryService
from .reports.service import RecapService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .storage.photo_storage import FileSystemPhotoStorage
from .users.mysql_auth_repository import MySQLAuthAccountRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    tz: ZoneInfo

    users_repo: MySQLUserRepository
    accounts_repo: MySQLAuthAccountRepository
    settings_repo: MySQLSettingsRepository
    attendance_repo: FallbackAttendanceRepository
    leaves_repo: MySQLLeaveRepository
    photo_storage: FileSystemPhotoStorage

    settings_service: SettingsService
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    leave_service: LeaveService
    recap_service: RecapService
    archive_service: ArchiveService
    photo_cleanup_service: PhotoCleanupService
    daily_summary_service: DailySummaryService


def build_container(
    *,
    db_config: dict,
    site_timezone: str = DEFAULT_SITE_TIMEZONE,
    storage_dir: str | Path = "storage",
    cache_path: str | Path = "storage/attendance_cache.json",
    cleanup_batch_size: int = DEFAULT_CLEANUP_BATCH_SIZE,
    max_clock_skew_minutes: int = 0,
    gemini_api_key: str | None = None,
    gemini_model: str = DEFAULT_GEMINI_MODEL,
) -> Container:
    conn = DatabaseConnection.get_instance(db_config_from_dict(db_config))
    tz = ZoneInfo(site_timezone)

    users_repo = MySQLUserRepository(conn)
    accounts_repo = MySQLAuthAccountRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    attendance_repo = FallbackAttendanceRepository(MySQLAttendanceRepository(conn), JsonFileCache(cache_path))
    leaves_repo = MySQLLeaveRepository(conn)
    photo_storage = FileSystemPhotoStorage(storage_dir)

    settings_service = SettingsService(settings_repo)
    auth_service = AuthService(users_repo, accounts_repo)
    user_service = UserService(users_repo, accounts_repo, photo_storage, tz=tz)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        settings_service,
        photo_storage,
        tz=tz,
        strategy_factory=AttendanceStrategyFactory(),
        max_clock_skew=timedelta(minutes=max_clock_skew_minutes) if max_clock_skew_minutes > 0 else None,
    )
    leave_service = LeaveService(leaves_repo, users_repo, photo_storage, tz=tz)
    recap_service = RecapService(attendance_repo, leaves_repo, users_repo, tz=tz)
    archive_service = ArchiveService(attendance_repo, batch_size=cleanup_batch_size)
    photo_cleanup_service = PhotoCleanupService(photo_storage, batch_size=cleanup_batch_size)
    daily_summary_service = DailySummaryService(recap_service, tz=tz, api_key=gemini_api_key, model=gemini_model)

    return Container(
        conn=conn,
        tz=tz,
        users_repo=users_repo,
        accounts_repo=accounts_repo,
        settings_repo=settings_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        photo_storage=photo_storage,
        settings_service=settings_service,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        recap_service=recap_service,
        archive_service=archive_service,
        photo_cleanup_service=photo_cleanup_service,
        daily_summary_service=daily_summary_service,
    )
