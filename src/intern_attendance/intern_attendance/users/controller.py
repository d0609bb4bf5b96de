from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.decorators import (
    admin_required,
    current_user_id,
    error_response,
    login_required,
    system_error,
)
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.post("/api/auth/login")
    def login():
        payload = request.get_json(silent=True) or {}
        username = payload.get("username", "")
        password = payload.get("password", "")
        remember = bool(payload.get("rememberMe"))

        # No half-signed-in state survives a failed attempt.
        session.clear()
        try:
            s_user = container.auth_service.authenticate(username, password)
        except DomainError as e:
            session.clear()
            return error_response(e)
        except Exception:
            session.clear()
            return system_error("logging in")

        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        return jsonify(
            {
                "success": True,
                "message": "Login berhasil",
                "user": {"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value},
            }
        )

    @app.post("/api/auth/logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Berhasil keluar"})

    @app.get("/api/auth/me")
    @login_required
    def me():
        try:
            user = container.user_service.get_user(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "user": user.to_dict()})

    @app.put("/api/me/photo")
    @login_required
    def update_my_photo():
        payload = request.get_json(silent=True) or {}
        try:
            user = container.user_service.update_profile_photo(user_id=current_user_id(), photo=payload.get("photo"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("updating profile photo")
        return jsonify({"success": True, "message": "Foto profil diperbarui", "user": user.to_dict()})

    @app.get("/api/admin/users")
    @admin_required
    def list_users():
        try:
            users = container.user_service.list_users()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "users": [u.to_dict() for u in users]})

    @app.post("/api/admin/users")
    @admin_required
    def create_user():
        payload = request.get_json(silent=True) or {}
        try:
            user = container.user_service.create_user(
                name=payload.get("name", ""),
                username=payload.get("username", ""),
                email=payload.get("email", ""),
                password=payload.get("password", ""),
                role=payload.get("role") or "intern",
                division=payload.get("division"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("creating user")
        return jsonify({"success": True, "message": "Pengguna berhasil ditambahkan", "user": user.to_dict()}), 201

    @app.put("/api/admin/users/<user_id>")
    @admin_required
    def update_user(user_id: str):
        payload = request.get_json(silent=True) or {}
        try:
            user = container.user_service.update_user(
                user_id=user_id,
                name=payload.get("name", ""),
                username=payload.get("username", ""),
                role=payload.get("role") or "intern",
                division=payload.get("division"),
                email=payload.get("email"),
                password=payload.get("password"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("updating user")
        return jsonify({"success": True, "message": "Data pengguna diperbarui", "user": user.to_dict()})

    @app.delete("/api/admin/users/<user_id>")
    @admin_required
    def delete_user(user_id: str):
        try:
            container.user_service.delete_user(actor_id=current_user_id(), user_id=user_id)
            container.attendance_repo.forget_user(user_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("deleting user")
        return jsonify({"success": True, "message": "Pengguna dihapus"})
