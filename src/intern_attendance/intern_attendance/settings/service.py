from __future__ import annotations

import logging
from dataclasses import dataclass

from ..common.validators import require_hhmm, require_latitude, require_longitude, require_positive
from ..core.exceptions import ValidationError
from .model import SystemSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


@dataclass
class SettingsService:
    """Load/save the system settings row.

    The row is created with defaults on first read and overwritten wholesale on save.
    """

    settings_repo: SettingsRepository

    def load(self) -> SystemSettings:
        settings = self.settings_repo.get()
        if settings is None:
            settings = SystemSettings()
            self.settings_repo.save(settings)
            logger.info("System settings initialised with defaults")
        return settings

    def save(self, settings: SystemSettings) -> SystemSettings:
        validated = self.validate(settings)
        self.settings_repo.save(validated)
        logger.info(
            "System settings updated: radius=%sm late=%s",
            validated.max_distance_meters,
            validated.late_threshold,
        )
        return validated

    @staticmethod
    def validate(settings: SystemSettings) -> SystemSettings:
        return SystemSettings(
            office_lat=require_latitude(settings.office_lat, "Latitude kantor"),
            office_lng=require_longitude(settings.office_lng, "Longitude kantor"),
            max_distance_meters=require_positive(settings.max_distance_meters, "Radius maksimal"),
            late_threshold=require_hhmm(settings.late_threshold, "Batas keterlambatan"),
            clock_out_time_mon_thu=require_hhmm(settings.clock_out_time_mon_thu, "Jam pulang Senin-Kamis"),
            clock_out_time_fri=require_hhmm(settings.clock_out_time_fri, "Jam pulang Jumat"),
        )

    @staticmethod
    def from_payload(payload: dict) -> SystemSettings:
        """Build settings from a camelCase JSON body; every field is required."""

        if not isinstance(payload, dict):
            raise ValidationError("Data pengaturan tidak valid")
        fields = {
            "officeLat": "office_lat",
            "officeLng": "office_lng",
            "maxDistanceMeters": "max_distance_meters",
            "lateThreshold": "late_threshold",
            "clockOutTimeMonThu": "clock_out_time_mon_thu",
            "clockOutTimeFri": "clock_out_time_fri",
        }
        missing = [key for key in fields if payload.get(key) in (None, "")]
        if missing:
            raise ValidationError(f"Pengaturan belum lengkap: {', '.join(missing)}")
        return SystemSettings(**{attr: payload[key] for key, attr in fields.items()})
