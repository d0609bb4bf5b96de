from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PreconditionFailed,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PreconditionFailed, 409),
    (ConflictError, 409),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Silakan login terlebih dahulu."}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Silakan login terlebih dahulu."}), 401
        if not current_role().is_admin:
            return jsonify({"success": False, "message": "Akses khusus admin."}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.INTERN


def error_response(exc: DomainError):
    """Map a domain error to a JSON response.

    Storage errors never leak backend details to the client.
    """

    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc)
        return jsonify({"success": False, "message": "Layanan penyimpanan sedang tidak tersedia. Coba lagi."}), 503

    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return jsonify({"success": False, "message": str(exc)}), status
    return jsonify({"success": False, "message": str(exc)}), 400


def system_error(action: str):
    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "message": "Terjadi kesalahan sistem."}), 500
