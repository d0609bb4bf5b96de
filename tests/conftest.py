from __future__ import annotations

import base64
import io
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from PIL import Image


@pytest.fixture
def tz() -> ZoneInfo:
    return ZoneInfo("Asia/Makassar")


@pytest.fixture
def fixed_now(tz) -> datetime:
    # Tuesday, last day of June 2026, mid-morning site time.
    return datetime(2026, 6, 30, 10, 0, 0, tzinfo=tz)


@pytest.fixture
def png_data_url() -> str:
    img = Image.new("RGB", (8, 8), (200, 30, 30))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
