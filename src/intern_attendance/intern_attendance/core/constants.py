"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Office location defaults (Bapekom Wilayah VIII Makassar, approx.)
DEFAULT_OFFICE_LAT = -5.1597000997736
DEFAULT_OFFICE_LNG = 119.40979746499184
DEFAULT_MAX_DISTANCE_METERS = 500.0
DEFAULT_LATE_THRESHOLD = "07:40"
DEFAULT_CLOCK_OUT_MON_THU = "16:00"
DEFAULT_CLOCK_OUT_FRI = "16:30"

DEFAULT_SITE_TIMEZONE = "Asia/Makassar"
DEFAULT_DIVISION = "Umum"

EARTH_RADIUS_KM = 6371.0

DEFAULT_HISTORY_LIMIT = 30
RECENT_DAYS = 30
WEEKLY_DAYS = 7

MAX_PROFILE_PHOTO_BYTES = 500 * 1024
MAX_ATTACHMENT_BYTES = 1024 * 1024
MAX_SELFIE_BYTES = 5 * 1024 * 1024

ATTENDANCE_PHOTO_BUCKET = "attendance-photos"
LEAVE_ATTACHMENT_BUCKET = "leave-attachments"
PROFILE_PHOTO_BUCKET = "profile-photos"

DEFAULT_CLEANUP_BATCH_SIZE = 1000

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
SHORT_DAY_NAMES = ["Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min"]

ORGANIZATION_NAME = "Bapekom Wilayah VIII Makassar"
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
