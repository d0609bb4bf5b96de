from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.decorators import admin_required, error_response, login_required, system_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.get("/api/settings")
    @login_required
    def get_settings():
        try:
            settings = container.settings_service.load()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "settings": settings.to_dict()})

    @app.put("/api/settings")
    @admin_required
    def update_settings():
        payload = request.get_json(silent=True) or {}
        try:
            settings = container.settings_service.from_payload(payload)
            saved = container.settings_service.save(settings)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("saving settings")
        return jsonify({"success": True, "message": "Pengaturan berhasil disimpan", "settings": saved.to_dict()})
