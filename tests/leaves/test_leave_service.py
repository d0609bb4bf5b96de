from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.intern_attendance.intern_attendance.core.enums import LeaveStatus, LeaveType, Role
from src.intern_attendance.intern_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PreconditionFailed,
    ValidationError,
)
from src.intern_attendance.intern_attendance.leaves.service import LeaveForm, LeaveService
from src.intern_attendance.intern_attendance.storage.photo_storage import FileSystemPhotoStorage
from src.intern_attendance.intern_attendance.users.model import User
from tests.fakes import InMemoryLeaves, InMemoryUsers


@pytest.fixture
def leaves():
    return InMemoryLeaves()


@pytest.fixture
def storage(tmp_path):
    return FileSystemPhotoStorage(tmp_path / "storage")


@pytest.fixture
def service(leaves, storage, tz):
    users = InMemoryUsers(
        [
            User(user_id="u1", name="Ahmad", username="ahmad", role=Role.INTERN, division="IT"),
            User(user_id="u2", name="Budi", username="budi", role=Role.INTERN),
        ]
    )
    return LeaveService(leaves, users, storage, tz=tz)


def izin(start="2026-07-01", end="2026-07-02", reason="Acara keluarga", attachment=None, type="izin"):
    return LeaveForm(type=type, start_date=start, end_date=end, reason=reason, attachment=attachment)


def test_create_leave_is_pending_with_profile_snapshot(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    assert leave.status == LeaveStatus.PENDING
    assert leave.type == LeaveType.PERMISSION
    assert (leave.start_date, leave.end_date) == (date(2026, 7, 1), date(2026, 7, 2))
    assert (leave.user_name, leave.division) == ("Ahmad", "IT")
    assert leave.request_date == fixed_now
    assert service.pending_count() == 1


def test_only_interns_can_request_leave(service, leaves, fixed_now):
    with pytest.raises(AuthorizationError):
        service.create_leave(user_id="u1", current_role=Role.ADMIN, form=izin(), now=fixed_now)
    assert leaves.writes == 0


def test_sick_leave_requires_attachment(service, leaves, fixed_now):
    with pytest.raises(ValidationError):
        service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(type="sakit"), now=fixed_now)
    assert leaves.writes == 0


def test_sick_leave_stores_attachment(service, storage, fixed_now, png_data_url):
    leave = service.create_leave(
        user_id="u1",
        current_role=Role.INTERN,
        form=izin(type="sakit", attachment=png_data_url),
        now=fixed_now,
    )

    assert leave.attachment_url.startswith("/api/files/leave-attachments/u1/2026-06-30_")
    assert len(storage.list("leave-attachments", limit=10)) == 1


@pytest.mark.parametrize(
    "form",
    [
        izin(start="2026-07-03", end="2026-07-01"),
        izin(start="01/07/2026"),
        izin(start=20260701, end=20260702),
        izin(reason="   "),
        izin(type="cuti"),
    ],
)
def test_invalid_form_is_refused(service, fixed_now, form):
    with pytest.raises(ValidationError):
        service.create_leave(user_id="u1", current_role=Role.INTERN, form=form, now=fixed_now)


def test_overlapping_request_is_refused(service, fixed_now):
    service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    with pytest.raises(ValidationError):
        service.create_leave(
            user_id="u1", current_role=Role.INTERN, form=izin(start="2026-07-02", end="2026-07-05"), now=fixed_now
        )

    # other users and rejected requests do not block
    service.create_leave(user_id="u2", current_role=Role.INTERN, form=izin(), now=fixed_now)


def test_rejected_request_does_not_block_new_one(service, fixed_now):
    first = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)
    service.reject_leave(current_role=Role.ADMIN, request_id=first.request_id, reason="Tidak ada bukti")

    second = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    assert second.status == LeaveStatus.PENDING


def test_owner_can_edit_pending_request(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    updated = service.update_leave(
        user_id="u1", request_id=leave.request_id, form=izin(end="2026-07-03", reason="Acara keluarga besar")
    )

    assert updated.end_date == date(2026, 7, 3)
    assert service.get_leave(leave.request_id).reason == "Acara keluarga besar"


def test_edit_of_decided_request_is_refused_and_storage_untouched(service, leaves, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)
    service.approve_leave(current_role=Role.ADMIN, request_id=leave.request_id)
    writes = leaves.writes

    with pytest.raises(PreconditionFailed):
        service.update_leave(user_id="u1", request_id=leave.request_id, form=izin(reason="Diubah"))

    assert leaves.writes == writes
    assert service.get_leave(leave.request_id).reason == "Acara keluarga"


def test_only_owner_can_edit(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    with pytest.raises(AuthorizationError):
        service.update_leave(user_id="u2", request_id=leave.request_id, form=izin())


def test_approve_moves_to_approved(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    approved = service.approve_leave(current_role=Role.ADMIN, request_id=leave.request_id)

    assert approved.status == LeaveStatus.APPROVED
    assert service.pending_count() == 0
    assert [x.request_id for x in service.approved_between(date(2026, 7, 2), date(2026, 7, 2))] == [leave.request_id]


def test_reject_without_reason_leaves_request_pending(service, leaves, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)
    writes = leaves.writes

    with pytest.raises(ValidationError):
        service.reject_leave(current_role=Role.ADMIN, request_id=leave.request_id, reason="  ")

    assert leaves.writes == writes
    assert service.get_leave(leave.request_id).status == LeaveStatus.PENDING


def test_reject_records_reason(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    rejected = service.reject_leave(current_role=Role.SUPER_ADMIN, request_id=leave.request_id, reason="Kuota habis")

    assert rejected.status == LeaveStatus.REJECTED
    assert service.get_leave(leave.request_id).rejection_reason == "Kuota habis"


def test_decided_request_cannot_be_decided_again(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)
    service.approve_leave(current_role=Role.ADMIN, request_id=leave.request_id)

    with pytest.raises(PreconditionFailed):
        service.reject_leave(current_role=Role.ADMIN, request_id=leave.request_id, reason="Berubah pikiran")


def test_intern_cannot_decide(service, fixed_now):
    leave = service.create_leave(user_id="u1", current_role=Role.INTERN, form=izin(), now=fixed_now)

    with pytest.raises(AuthorizationError):
        service.approve_leave(current_role=Role.INTERN, request_id=leave.request_id)


def test_unknown_request_raises(service):
    with pytest.raises(NotFoundError):
        service.approve_leave(current_role=Role.ADMIN, request_id="missing")


def test_form_from_payload_reads_camel_case():
    form = LeaveForm.from_payload({"type": "sakit", "startDate": "2026-07-01", "endDate": "2026-07-01", "reason": "Demam"})

    assert form == LeaveForm(type="sakit", start_date="2026-07-01", end_date="2026-07-01", reason="Demam")


def sick_leave_with_attachment(service, fixed_now, png_data_url):
    return service.create_leave(
        user_id="u1",
        current_role=Role.INTERN,
        form=izin(type="sakit", attachment=png_data_url),
        now=fixed_now,
    )


def stored_attachment_urls(storage):
    return [f"/api/files/leave-attachments/{obj.key}" for obj in storage.list("leave-attachments", limit=10)]


def test_replaced_attachment_is_removed(service, storage, fixed_now, png_data_url):
    leave = sick_leave_with_attachment(service, fixed_now, png_data_url)

    updated = service.update_leave(
        user_id="u1",
        request_id=leave.request_id,
        form=izin(type="sakit", attachment=png_data_url),
        now=fixed_now + timedelta(minutes=5),
    )

    assert updated.attachment_url != leave.attachment_url
    assert stored_attachment_urls(storage) == [updated.attachment_url]


def test_edit_keeps_attachment_when_none_is_sent(service, storage, fixed_now, png_data_url):
    leave = sick_leave_with_attachment(service, fixed_now, png_data_url)

    updated = service.update_leave(
        user_id="u1", request_id=leave.request_id, form=izin(type="sakit", reason="Masih demam")
    )

    assert updated.attachment_url == leave.attachment_url
    assert stored_attachment_urls(storage) == [leave.attachment_url]


def test_new_attachment_is_removed_when_request_is_decided_during_edit(
    service, leaves, storage, fixed_now, png_data_url, monkeypatch
):
    leave = sick_leave_with_attachment(service, fixed_now, png_data_url)
    update_pending = leaves.update_pending

    def approved_first(updated):
        leaves.decide(updated.request_id, status=LeaveStatus.APPROVED)
        return update_pending(updated)

    monkeypatch.setattr(leaves, "update_pending", approved_first)

    with pytest.raises(PreconditionFailed):
        service.update_leave(
            user_id="u1",
            request_id=leave.request_id,
            form=izin(type="sakit", attachment=png_data_url),
            now=fixed_now + timedelta(minutes=5),
        )

    assert stored_attachment_urls(storage) == [leave.attachment_url]
