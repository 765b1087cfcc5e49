import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

# "mysql" or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

# Base URL embedded in the QR code: {CHECKIN_BASE_URL}/checkin?token=...
CHECKIN_BASE_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

QR_ROTATION_SECONDS = int(os.getenv("QR_EXPIRY_SECONDS", "60"))
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "15"))
SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "210"))

# Institutional timezone for the once-per-day check-in key (UTC+8)
DAY_KEY_UTC_OFFSET_HOURS = int(os.getenv("DAY_KEY_UTC_OFFSET_HOURS", "8"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
