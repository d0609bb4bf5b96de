from __future__ import annotations

from flask import Flask, send_file

from ..common.decorators import error_response, login_required
from ..container import Container
from ..core.constants import ATTENDANCE_PHOTO_BUCKET, LEAVE_ATTACHMENT_BUCKET, PROFILE_PHOTO_BUCKET
from ..core.exceptions import DomainError, NotFoundError

BUCKETS = {ATTENDANCE_PHOTO_BUCKET, LEAVE_ATTACHMENT_BUCKET, PROFILE_PHOTO_BUCKET}


def register(app: Flask, container: Container) -> None:
    @app.get("/api/files/<bucket>/<path:key>")
    @login_required
    def get_file(bucket: str, key: str):
        try:
            if bucket not in BUCKETS:
                raise NotFoundError("File tidak ditemukan")
            path = container.photo_storage.open(bucket, key)
        except DomainError as e:
            return error_response(e)
        return send_file(path, mimetype="image/jpeg")
