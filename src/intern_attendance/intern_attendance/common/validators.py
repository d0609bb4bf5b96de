from __future__ import annotations

import math
import re
from typing import Any

from ..core.exceptions import ValidationError

HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} wajib diisi")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} minimal {min_len} karakter")
    return value


def require_hhmm(value: str, field_name: str) -> str:
    """Validate a 24-hour ``HH:mm`` string (``7:40`` and ``07:40`` both accepted)."""

    v = value.strip() if isinstance(value, str) else ""
    if not HHMM_RE.match(v):
        raise ValidationError(f"Waktu '{field_name}' tidak valid. Format harus HH:mm (contoh: 07:40).")
    return v


def parse_hhmm(value: str, field_name: str = "Waktu") -> tuple[int, int]:
    v = require_hhmm(value, field_name)
    hour, minute = v.split(":")
    return int(hour), int(minute)


def require_finite(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} harus berupa angka")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} harus berupa angka")
    return number


def require_latitude(value: Any, field_name: str = "Latitude") -> float:
    lat = require_finite(value, field_name)
    if lat < -90 or lat > 90:
        raise ValidationError(f"{field_name} tidak valid. Nilai harus antara -90 dan 90.")
    return lat


def require_longitude(value: Any, field_name: str = "Longitude") -> float:
    lng = require_finite(value, field_name)
    if lng < -180 or lng > 180:
        raise ValidationError(f"{field_name} tidak valid. Nilai harus antara -180 dan 180.")
    return lng


def require_positive(value: Any, field_name: str) -> float:
    number = require_finite(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} harus berupa angka positif lebih dari 0.")
    return number
