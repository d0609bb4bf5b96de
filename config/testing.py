import os

from config import env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "intern_attendance_test"),
}

DEBUG = False
TESTING = True

SITE_TIMEZONE = os.getenv("SITE_TIMEZONE", "Asia/Makassar")
STORAGE_DIR = os.getenv("STORAGE_DIR", "instance/test-storage")
FALLBACK_CACHE_PATH = os.getenv("FALLBACK_CACHE_PATH", "instance/test-storage/attendance_cache.json")
MAX_CLOCK_SKEW_MINUTES = 0
GEMINI_API_KEY = None

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FILE = None

CLEANUP_YEARS = 1
CLEANUP_BATCH_SIZE = 1000
CLEANUP_BUCKET = "attendance-photos"

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
