import os

from config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "intern_attendance"),
}

DEBUG = False

SITE_TIMEZONE = os.getenv("SITE_TIMEZONE", "Asia/Makassar")
STORAGE_DIR = os.getenv("STORAGE_DIR", "/var/lib/intern-attendance/storage")
FALLBACK_CACHE_PATH = os.getenv("FALLBACK_CACHE_PATH", "/var/lib/intern-attendance/attendance_cache.json")
# Reject check-ins whose device clock is further than this from the server (0 disables)
MAX_CLOCK_SKEW_MINUTES = int(os.getenv("MAX_CLOCK_SKEW_MINUTES", "5"))

# Admin daily summary via Gemini; disabled without a key
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or None
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

CLEANUP_YEARS = int(os.getenv("CLEANUP_YEARS", "1"))
CLEANUP_BATCH_SIZE = int(os.getenv("CLEANUP_BATCH_SIZE", "1000"))
CLEANUP_BUCKET = os.getenv("CLEANUP_BUCKET", "attendance-photos")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
