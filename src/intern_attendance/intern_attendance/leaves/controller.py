from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.decorators import admin_required, current_role, current_user_id, error_response, login_required, system_error
from ..container import Container
from ..core.enums import LeaveStatus
from ..core.exceptions import DomainError, ValidationError
from .service import LeaveForm


def _parse_status(value):
    if not value:
        return None
    try:
        return LeaveStatus(value)
    except ValueError:
        raise ValidationError(f"Status tidak valid: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.get("/api/leaves")
    @login_required
    def my_leaves():
        try:
            leaves = service.list_for_user(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "leaves": [leave.to_dict() for leave in leaves]})

    @app.post("/api/leaves")
    @login_required
    def create_leave():
        try:
            form = LeaveForm.from_payload(request.get_json(silent=True) or {})
            leave = service.create_leave(user_id=current_user_id(), current_role=current_role(), form=form)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("creating leave request")
        return jsonify({"success": True, "message": "Pengajuan izin terkirim", "leave": leave.to_dict()}), 201

    @app.put("/api/leaves/<request_id>")
    @login_required
    def update_leave(request_id: str):
        try:
            form = LeaveForm.from_payload(request.get_json(silent=True) or {})
            leave = service.update_leave(user_id=current_user_id(), request_id=request_id, form=form)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("updating leave request")
        return jsonify({"success": True, "message": "Pengajuan izin diperbarui", "leave": leave.to_dict()})

    @app.get("/api/admin/leaves")
    @admin_required
    def list_leaves():
        try:
            leaves = service.list_all(status=_parse_status(request.args.get("status")))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "leaves": [leave.to_dict() for leave in leaves]})

    @app.get("/api/admin/leaves/pending-count")
    @admin_required
    def pending_count():
        try:
            count = service.pending_count()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "count": count})

    @app.post("/api/admin/leaves/<request_id>/approve")
    @admin_required
    def approve_leave(request_id: str):
        try:
            leave = service.approve_leave(current_role=current_role(), request_id=request_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("approving leave request")
        return jsonify({"success": True, "message": "Pengajuan disetujui", "leave": leave.to_dict()})

    @app.post("/api/admin/leaves/<request_id>/reject")
    @admin_required
    def reject_leave(request_id: str):
        payload = request.get_json(silent=True) or {}
        try:
            leave = service.reject_leave(
                current_role=current_role(), request_id=request_id, reason=payload.get("reason", "")
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("rejecting leave request")
        return jsonify({"success": True, "message": "Pengajuan ditolak", "leave": leave.to_dict()})
