from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.decorators import (
    admin_required,
    current_role,
    current_user_id,
    error_response,
    login_required,
    system_error,
)
from ..container import Container
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from .export import recap_csv


def register(app: Flask, container: Container) -> None:
    service = container.recap_service

    def _recap_args():
        """month/year default to the current site-local month; only admins may pass user_id."""

        today = now_local(container.tz).date()
        try:
            month = int(request.args.get("month", today.month))
            year = int(request.args.get("year", today.year))
        except ValueError:
            raise ValidationError("Bulan/tahun harus berupa angka")

        user_id = request.args.get("user_id") or current_user_id()
        if user_id != current_user_id() and not current_role().is_admin:
            raise AuthorizationError("Anda hanya dapat melihat rekap milik sendiri")
        return user_id, month, year

    @app.get("/api/recap")
    @login_required
    def monthly_recap():
        try:
            user_id, month, year = _recap_args()
            recap = service.monthly_recap(user_id, month, year)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "recap": recap.to_dict()})

    @app.get("/api/recap.csv")
    @login_required
    def monthly_recap_csv():
        try:
            user_id, month, year = _recap_args()
            recap = service.monthly_recap(user_id, month, year)
        except DomainError as e:
            return error_response(e)
        return app.response_class(
            recap_csv(recap),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=rekap_{year}_{month:02d}.csv"},
        )

    @app.get("/api/me/stats")
    @login_required
    def my_stats():
        try:
            stats = service.user_stats(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "stats": stats.to_dict()})

    @app.get("/api/admin/stats")
    @admin_required
    def dashboard_stats():
        try:
            stats = service.dashboard_stats()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "stats": stats.to_dict()})

    @app.get("/api/admin/stats/weekly")
    @admin_required
    def weekly_stats():
        try:
            result = service.weekly_stats()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "days": [d.to_dict() for d in result.items], "degraded": result.degraded})

    @app.post("/api/admin/daily-summary")
    @admin_required
    def daily_summary():
        try:
            summary = container.daily_summary_service.generate()
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("generating daily summary")
        if not summary.generated:
            return jsonify({"success": False, "message": summary.text, **summary.to_dict()}), 503
        return jsonify({"success": True, **summary.to_dict()})
