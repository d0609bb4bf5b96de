from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date, parse_timestamp
from ..common.decorators import admin_required, current_user_id, error_response, login_required, system_error
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceType
from ..core.exceptions import DomainError
from .export import attendance_csv, users_summary_csv
from .model import AttendanceSubmission
from .service import parse_attendance_type, parse_location


def _records_payload(result) -> dict:
    return {"success": True, "records": [r.to_dict() for r in result.items], "degraded": result.degraded}


def _csv_response(app: Flask, data: bytes, filename: str):
    return app.response_class(
        data,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.post("/api/attendance")
    @login_required
    def submit_attendance():
        payload = request.get_json(silent=True) or {}
        try:
            submission = AttendanceSubmission(
                timestamp=parse_timestamp(payload.get("timestamp", ""), service.tz),
                type=parse_attendance_type(payload.get("type")),
                photo=payload.get("photo") or "",
                location=parse_location(payload.get("location")),
            )
            record = service.submit(current_user_id(), submission)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("submitting attendance")

        message = "Absen masuk berhasil" if record.type == AttendanceType.IN else "Absen pulang berhasil"
        return jsonify({"success": True, "message": message, "record": record.to_dict()}), 201

    @app.get("/api/attendance/me")
    @login_required
    def my_history():
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        try:
            result = service.history(current_user_id(), limit=limit)
        except DomainError as e:
            return error_response(e)
        return jsonify(_records_payload(result))

    @app.get("/api/me/today")
    @login_required
    def my_today():
        try:
            today = service.today_for_user(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "today": today.to_dict()})

    @app.get("/api/admin/attendance")
    @admin_required
    def list_attendance():
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        try:
            result = service.list_records(
                start_date=parse_iso_date(start_s) if start_s else None,
                end_date=parse_iso_date(end_s) if end_s else None,
                limit=request.args.get("limit", type=int),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(_records_payload(result))

    @app.get("/api/admin/attendance/today")
    @admin_required
    def list_today():
        try:
            result = service.today_records()
        except DomainError as e:
            return error_response(e)
        return jsonify(_records_payload(result))

    @app.get("/api/admin/attendance/recent")
    @admin_required
    def list_recent():
        try:
            result = service.recent_records()
        except DomainError as e:
            return error_response(e)
        return jsonify(_records_payload(result))

    @app.get("/api/admin/attendance.csv")
    @admin_required
    def export_attendance():
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        try:
            result = service.list_records(
                start_date=parse_iso_date(start_s) if start_s else None,
                end_date=parse_iso_date(end_s) if end_s else None,
            )
        except DomainError as e:
            return error_response(e)

        stamp = now_local(service.tz).strftime("%Y-%m-%d")
        return _csv_response(app, attendance_csv(result.items, service.tz), f"riwayat_absensi_{stamp}.csv")

    @app.get("/api/admin/users.csv")
    @admin_required
    def export_users():
        try:
            users = container.user_service.list_users()
            result = service.list_records()
        except DomainError as e:
            return error_response(e)

        stamp = now_local(service.tz).strftime("%Y-%m-%d")
        return _csv_response(app, users_summary_csv(users, result.items, service.tz), f"data_magang_{stamp}.csv")
