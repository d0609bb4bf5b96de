from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from google import genai
from google.genai import errors as genai_errors

from ..common.datetime_utils import to_site
from ..core.constants import DEFAULT_GEMINI_MODEL, ORGANIZATION_NAME
from .model import DailyRoll
from .service import RecapService

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "API Key Gemini tidak ditemukan atau tidak valid."
EMPTY_RESPONSE_MESSAGE = "Gagal menghasilkan ringkasan (Respon kosong atau format tidak sesuai)."

PROMPT_TEMPLATE = """\
Bertindaklah sebagai administrator SDM di {organization}.
Analisis data absensi mentah berikut ini untuk hari ini ({work_date}) dan buatlah ringkasan laporan harian yang profesional dalam bahasa Indonesia.

Data Absensi (Hadir):
{records}

{absent}

Format laporan harus mencakup:
1. Ringkasan kehadiran (Total hadir, terlambat, dan alpa).
2. Daftar nama yang terlambat (jika ada).
3. Daftar nama yang Alpa/Bolos (Sangat Penting: sebutkan namanya jika ada).
4. Anomali lokasi (status invalid) jika ada.
5. Kesimpulan umum kedisiplinan hari ini.

Gunakan nada formal, tegas untuk yang alpa, dan ringkas.
"""


@dataclass(frozen=True)
class DailySummary:
    work_date: date
    text: str
    generated: bool
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "summary": self.text,
            "generated": self.generated,
            "degraded": self.degraded,
        }


def build_prompt(roll: DailyRoll, tz: ZoneInfo, *, organization: str = ORGANIZATION_NAME) -> str:
    rows = [
        {
            "name": r.user_name,
            "time": to_site(r.timestamp, tz).strftime("%H:%M:%S"),
            "type": r.type.value,
            "status": r.status.value,
            "isLate": r.is_late,
        }
        for r in sorted(roll.records, key=lambda r: r.timestamp)
    ]
    absent_names = [u.name for u in roll.absent]
    if absent_names:
        absent = f"Daftar Nama Alpa (Tidak Hadir Tanpa Keterangan): {', '.join(absent_names)}"
    else:
        absent = "Tidak ada yang alpa hari ini."

    return PROMPT_TEMPLATE.format(
        organization=organization,
        work_date=roll.work_date.isoformat(),
        records=json.dumps(rows, ensure_ascii=False),
        absent=absent,
    )


class DailySummaryService:
    """Admin daily report written by Gemini from today's rows and the names of absent interns.

    Without an API key nothing is sent and a fixed message is returned instead.
    """

    def __init__(
        self,
        recap: RecapService,
        *,
        tz: ZoneInfo,
        api_key: Optional[str] = None,
        model: str = DEFAULT_GEMINI_MODEL,
        client: Any = None,
    ):
        self._recap = recap
        self._tz = tz
        self._model = model
        if client is None and api_key:
            client = genai.Client(api_key=api_key)
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def generate(self, *, now: datetime | None = None) -> DailySummary:
        roll = self._recap.daily_roll(now=now)
        if not self.enabled:
            return DailySummary(work_date=roll.work_date, text=MISSING_KEY_MESSAGE, generated=False)

        prompt = build_prompt(roll, self._tz)
        try:
            response = self._client.models.generate_content(model=self._model, contents=prompt)
        except genai_errors.APIError as e:
            logger.warning("Gemini daily summary failed: %s", e)
            return DailySummary(
                work_date=roll.work_date,
                text=f"Terjadi kesalahan saat menghubungi layanan AI: {e.message or e.status}",
                generated=False,
                degraded=roll.degraded,
            )

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            return DailySummary(
                work_date=roll.work_date, text=EMPTY_RESPONSE_MESSAGE, generated=False, degraded=roll.degraded
            )

        logger.info("Daily summary generated for %s (%d rows)", roll.work_date, len(roll.records))
        return DailySummary(work_date=roll.work_date, text=text, generated=True, degraded=roll.degraded)
