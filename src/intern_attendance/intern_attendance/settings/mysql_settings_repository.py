from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SystemSettings
from .repository import SettingsRepository

_SETTINGS_ROW_ID = 1


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[SystemSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT office_lat, office_lng, max_distance_meters, late_threshold,
                       clock_out_time_mon_thu, clock_out_time_fri
                FROM system_settings
                WHERE settings_id=%s
                """,
                (_SETTINGS_ROW_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SystemSettings(
                office_lat=float(r["office_lat"]),
                office_lng=float(r["office_lng"]),
                max_distance_meters=float(r["max_distance_meters"]),
                late_threshold=r["late_threshold"],
                clock_out_time_mon_thu=r["clock_out_time_mon_thu"],
                clock_out_time_fri=r["clock_out_time_fri"],
            )

    def save(self, settings: SystemSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_settings(
                    settings_id, office_lat, office_lng, max_distance_meters,
                    late_threshold, clock_out_time_mon_thu, clock_out_time_fri
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    office_lat=VALUES(office_lat),
                    office_lng=VALUES(office_lng),
                    max_distance_meters=VALUES(max_distance_meters),
                    late_threshold=VALUES(late_threshold),
                    clock_out_time_mon_thu=VALUES(clock_out_time_mon_thu),
                    clock_out_time_fri=VALUES(clock_out_time_fri)
                """,
                (
                    _SETTINGS_ROW_ID,
                    settings.office_lat,
                    settings.office_lng,
                    settings.max_distance_meters,
                    settings.late_threshold,
                    settings.clock_out_time_mon_thu,
                    settings.clock_out_time_fri,
                ),
            )
