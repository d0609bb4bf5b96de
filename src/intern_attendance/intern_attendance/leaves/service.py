from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_non_empty
from ..core.constants import LEAVE_ATTACHMENT_BUCKET, MAX_ATTACHMENT_BYTES
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PreconditionFailed,
    StorageError,
    ValidationError,
)
from ..storage.photo_storage import PhotoStorage, decode_data_url, key_from_url, normalise_image, photo_key
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


@dataclass(frozen=True)
class LeaveForm:
    """Submitted leave fields, still unvalidated (camelCase body -> attributes)."""

    type: str
    start_date: str
    end_date: str
    reason: str
    attachment: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "LeaveForm":
        if not isinstance(payload, dict):
            raise ValidationError("Data pengajuan tidak valid")
        return cls(
            type=payload.get("type") or "",
            start_date=payload.get("startDate") or "",
            end_date=payload.get("endDate") or "",
            reason=payload.get("reason") or "",
            attachment=payload.get("attachment") or None,
        )


def parse_leave_type(value: str) -> LeaveType:
    try:
        return LeaveType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Jenis izin harus 'sakit' atau 'izin'")


class LeaveService:
    """Leave lifecycle: PENDING -> APPROVED | REJECTED.

    Only the owner edits, and only while pending. Only admins decide.
    """

    def __init__(self, leaves: LeaveRepository, users: UserRepository, storage: PhotoStorage, *, tz: ZoneInfo):
        self._leaves = leaves
        self._users = users
        self._storage = storage
        self._tz = tz

    def _validate(self, form: LeaveForm) -> tuple[LeaveType, date, date, str]:
        leave_type = parse_leave_type(form.type)
        start = parse_iso_date(form.start_date)
        end = parse_iso_date(form.end_date)
        if start > end:
            raise ValidationError("Tanggal mulai tidak boleh setelah tanggal selesai")
        reason = require_non_empty(form.reason, "Alasan")
        return leave_type, start, end, reason

    def _ensure_no_overlap(self, *, user_id: str, start: date, end: date, ignore_id: Optional[str] = None) -> None:
        clashes = [
            leave
            for leave in self._leaves.list_overlapping(
                start_date=start, end_date=end, statuses=BLOCKING_STATUSES, user_id=user_id
            )
            if leave.request_id != ignore_id
        ]
        if clashes:
            first = clashes[0]
            raise ValidationError(
                f"Sudah ada pengajuan {first.type.value} ({first.status.value}) "
                f"pada {first.start_date.isoformat()} s/d {first.end_date.isoformat()}"
            )

    def _store_attachment(self, user_id: str, attachment: str, now: datetime) -> str:
        raw = decode_data_url(attachment, field_name="Lampiran")
        data = normalise_image(raw, max_bytes=MAX_ATTACHMENT_BYTES, field_name="Lampiran")
        return self._storage.save(LEAVE_ATTACHMENT_BUCKET, photo_key(user_id, now), data)

    def _remove_attachment(self, url: Optional[str]) -> None:
        key = key_from_url(LEAVE_ATTACHMENT_BUCKET, url)
        if not key:
            return
        try:
            self._storage.remove(LEAVE_ATTACHMENT_BUCKET, [key])
        except StorageError as e:
            logger.warning("Could not remove leave attachment %s: %s", key, e)

    def create_leave(
        self,
        *,
        user_id: str,
        current_role: Role,
        form: LeaveForm,
        now: datetime | None = None,
    ) -> LeaveRequest:
        if current_role != Role.INTERN:
            raise AuthorizationError("Hanya peserta magang yang dapat mengajukan izin")

        leave_type, start, end, reason = self._validate(form)
        if leave_type == LeaveType.SICK and not form.attachment:
            raise ValidationError("Izin sakit wajib melampirkan surat keterangan / foto")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Pengguna tidak ditemukan")

        self._ensure_no_overlap(user_id=user_id, start=start, end=end)

        now = now or now_local(self._tz)
        attachment_url = self._store_attachment(user_id, form.attachment, now) if form.attachment else None

        leave = LeaveRequest(
            request_id=str(uuid.uuid4()),
            user_id=user.user_id,
            user_name=user.name,
            division=user.division_or_default,
            type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
            status=LeaveStatus.PENDING,
            request_date=now,
            attachment_url=attachment_url,
        )
        try:
            self._leaves.add(leave)
        except DomainError:
            self._remove_attachment(attachment_url)
            raise
        logger.info("Leave %s submitted by %s (%s..%s)", leave_type.value, user.username, start, end)
        return leave

    def update_leave(
        self,
        *,
        user_id: str,
        request_id: str,
        form: LeaveForm,
        now: datetime | None = None,
    ) -> LeaveRequest:
        current = self.get_leave(request_id)
        if current.user_id != user_id:
            raise AuthorizationError("Anda hanya dapat mengubah pengajuan milik sendiri")
        if current.status != LeaveStatus.PENDING:
            raise PreconditionFailed("Pengajuan yang sudah diproses tidak dapat diubah")

        leave_type, start, end, reason = self._validate(form)
        if leave_type == LeaveType.SICK and not (form.attachment or current.attachment_url):
            raise ValidationError("Izin sakit wajib melampirkan surat keterangan / foto")

        self._ensure_no_overlap(user_id=user_id, start=start, end=end, ignore_id=request_id)

        attachment_url = current.attachment_url
        if form.attachment:
            attachment_url = self._store_attachment(user_id, form.attachment, now or now_local(self._tz))

        updated = replace(
            current,
            type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
            attachment_url=attachment_url,
        )
        try:
            if not self._leaves.update_pending(updated):
                # Zero affected rows: unchanged values, or decided in between.
                latest = self.get_leave(request_id)
                if latest.status != LeaveStatus.PENDING:
                    raise PreconditionFailed("Pengajuan yang sudah diproses tidak dapat diubah")
        except DomainError:
            if attachment_url != current.attachment_url:
                self._remove_attachment(attachment_url)
            raise

        if attachment_url != current.attachment_url:
            self._remove_attachment(current.attachment_url)
        logger.info("Leave %s updated by owner", request_id)
        return updated

    def approve_leave(self, *, current_role: Role, request_id: str) -> LeaveRequest:
        if not current_role.is_admin:
            raise AuthorizationError("Akses khusus admin")
        return self._decide(request_id, LeaveStatus.APPROVED, None)

    def reject_leave(self, *, current_role: Role, request_id: str, reason: str) -> LeaveRequest:
        if not current_role.is_admin:
            raise AuthorizationError("Akses khusus admin")
        if not reason or not str(reason).strip():
            raise ValidationError("Alasan penolakan wajib diisi")
        return self._decide(request_id, LeaveStatus.REJECTED, str(reason).strip())

    def _decide(self, request_id: str, status: LeaveStatus, rejection_reason: Optional[str]) -> LeaveRequest:
        leave = self.get_leave(request_id)
        if leave.status != LeaveStatus.PENDING:
            raise PreconditionFailed("Pengajuan sudah diproses sebelumnya")
        if not self._leaves.decide(request_id, status=status, rejection_reason=rejection_reason):
            raise PreconditionFailed("Pengajuan sudah diproses sebelumnya")
        logger.info("Leave %s %s", request_id, status.value)
        return replace(leave, status=status, rejection_reason=rejection_reason)

    def get_leave(self, request_id: str) -> LeaveRequest:
        leave = self._leaves.get_by_id(request_id)
        if not leave:
            raise NotFoundError("Pengajuan tidak ditemukan")
        return leave

    def list_for_user(self, user_id: str) -> Sequence[LeaveRequest]:
        return self._leaves.list_for_user(user_id)

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_all(status=status)

    def pending_count(self) -> int:
        return self._leaves.count_by_status(LeaveStatus.PENDING)

    def approved_between(self, start: date, end: date, *, user_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_overlapping(
            start_date=start, end_date=end, statuses=(LeaveStatus.APPROVED,), user_id=user_id
        )
