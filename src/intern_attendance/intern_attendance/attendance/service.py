from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_local, to_site
from ..common.validators import parse_hhmm, require_finite
from ..core.constants import ATTENDANCE_PHOTO_BUCKET, DEFAULT_HISTORY_LIMIT, MAX_SELFIE_BYTES, RECENT_DAYS
from ..core.enums import AttendanceType, LocationStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, PreconditionFailed, ValidationError
from ..settings.service import SettingsService
from ..storage.photo_storage import PhotoStorage, decode_data_url, normalise_image, photo_key
from ..users.repository import UserRepository
from .cached_repository import FallbackAttendanceRepository, ReadResult
from .factory import AttendanceStrategyFactory
from .geofence import is_within_geofence
from .model import AttendanceRecord, AttendanceSubmission, Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayStatus:
    """A user's attendance state for the current site-local day."""

    work_date: date
    check_in: Optional[AttendanceRecord]
    check_out: Optional[AttendanceRecord]
    clock_out_time: Optional[str]
    degraded: bool = False

    @property
    def can_check_in(self) -> bool:
        return self.check_in is None

    @property
    def can_check_out(self) -> bool:
        return self.check_in is not None and self.check_out is None

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "checkIn": self.check_in.to_dict() if self.check_in else None,
            "checkOut": self.check_out.to_dict() if self.check_out else None,
            "canCheckIn": self.can_check_in,
            "canCheckOut": self.can_check_out,
            "clockOutTime": self.clock_out_time,
            "degraded": self.degraded,
        }


def parse_location(payload) -> Location:
    if not isinstance(payload, dict):
        raise ValidationError("Lokasi wajib diisi")
    accuracy = require_finite(payload.get("accuracy", 0.0), "Akurasi")
    if accuracy < 0:
        raise ValidationError("Akurasi tidak boleh negatif")
    # range checks happen in the geofence
    return Location(
        latitude=require_finite(payload.get("latitude"), "Latitude"),
        longitude=require_finite(payload.get("longitude"), "Longitude"),
        accuracy=accuracy,
    )


def parse_attendance_type(value) -> AttendanceType:
    try:
        return AttendanceType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Tipe absen harus 'in' atau 'out'")


class AttendanceService:
    def __init__(
        self,
        attendance: FallbackAttendanceRepository,
        users: UserRepository,
        settings: SettingsService,
        storage: PhotoStorage,
        *,
        tz: ZoneInfo,
        strategy_factory: AttendanceStrategyFactory | None = None,
        max_clock_skew: timedelta | None = None,
    ):
        self._attendance = attendance
        self._users = users
        self._settings = settings
        self._storage = storage
        self._tz = tz
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._max_clock_skew = max_clock_skew

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def submit(
        self,
        user_id: str,
        submission: AttendanceSubmission,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Record a check-in/check-out.

        Lateness and geofence status are decided here once and stored; they are
        never recomputed when settings change later. With ``max_clock_skew`` set,
        a timestamp further than that from the server clock is rejected.
        """

        if self._max_clock_skew is not None:
            now = now or now_local(self._tz)
            if abs(submission.timestamp - now) > self._max_clock_skew:
                raise ValidationError("Waktu absen tidak sesuai dengan waktu server. Periksa jam perangkat Anda.")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Pengguna tidak ditemukan")

        settings = self._settings.load()
        local_time = to_site(submission.timestamp, self._tz)
        work_date = local_time.date()

        within = is_within_geofence(submission.location.latitude, submission.location.longitude, settings)

        existing = self._attendance.list_for_user_on(user_id, work_date)
        if any(r.type == submission.type for r in existing):
            if submission.type == AttendanceType.IN:
                raise ConflictError("Anda sudah absen masuk hari ini")
            raise ConflictError("Anda sudah absen pulang hari ini")
        if submission.type == AttendanceType.OUT and not any(r.type == AttendanceType.IN for r in existing):
            raise PreconditionFailed("Anda belum absen masuk hari ini")

        threshold = parse_hhmm(settings.late_threshold, "Batas keterlambatan")
        strategy = self._factory.for_submission(type=submission.type, local_time=local_time, threshold=threshold)
        decision = strategy.decide(local_time=local_time, threshold=threshold)

        raw = decode_data_url(submission.photo, field_name="Foto selfie")
        image = normalise_image(raw, max_bytes=MAX_SELFIE_BYTES, field_name="Foto selfie")
        key = photo_key(user_id, local_time)
        photo_url = self._storage.save(ATTENDANCE_PHOTO_BUCKET, key, image)

        record = AttendanceRecord(
            attendance_id=str(uuid.uuid4()),
            user_id=user.user_id,
            user_name=user.name,
            division=user.division_or_default,
            timestamp=submission.timestamp,
            work_date=work_date,
            type=submission.type,
            photo_url=photo_url,
            location=submission.location,
            is_late=decision.is_late,
            status=LocationStatus.VALID if within else LocationStatus.INVALID,
            notes=decision.note,
        )

        try:
            self._attendance.add(record)
        except DomainError:
            # no row references the selfie
            self._storage.remove(ATTENDANCE_PHOTO_BUCKET, [key])
            raise

        logger.info(
            "Attendance %s recorded for %s on %s (late=%s, status=%s)",
            record.type.value,
            user.username,
            work_date,
            record.is_late,
            record.status.value,
        )
        return record

    def today_for_user(self, user_id: str, *, now: datetime | None = None) -> TodayStatus:
        now = now or now_local(self._tz)
        today = to_site(now, self._tz).date()

        result = self._attendance.list_by_dates(start_date=today, end_date=today, user_id=user_id)
        check_in = _earliest(result.items, AttendanceType.IN)
        check_out = _earliest(result.items, AttendanceType.OUT)

        return TodayStatus(
            work_date=today,
            check_in=check_in,
            check_out=check_out,
            clock_out_time=self._settings.load().clock_out_time_for(today),
            degraded=result.degraded,
        )

    def history(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> ReadResult[AttendanceRecord]:
        return self._attendance.list_for_user(user_id, limit)

    def list_records(
        self,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> ReadResult[AttendanceRecord]:
        if start_date is None and end_date is None:
            return self._attendance.list_all(limit)
        start_date = start_date or date(1970, 1, 1)
        end_date = end_date or date.max
        if start_date > end_date:
            raise ValidationError("Tanggal mulai tidak boleh setelah tanggal selesai")
        return self._attendance.list_by_dates(start_date=start_date, end_date=end_date)

    def today_records(self, *, now: datetime | None = None) -> ReadResult[AttendanceRecord]:
        now = now or now_local(self._tz)
        today = to_site(now, self._tz).date()
        return self._attendance.list_by_dates(start_date=today, end_date=today)

    def recent_records(self, *, now: datetime | None = None, days: int = RECENT_DAYS) -> ReadResult[AttendanceRecord]:
        now = now or now_local(self._tz)
        today = to_site(now, self._tz).date()
        return self._attendance.list_by_dates(start_date=today - timedelta(days=days - 1), end_date=today)


def _earliest(records, type: AttendanceType) -> Optional[AttendanceRecord]:
    matching = [r for r in records if r.type == type]
    return min(matching, key=lambda r: r.timestamp) if matching else None
