"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_LIFETIME_DAYS = 210
DEFAULT_QR_ROTATION_SECONDS = 60
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_DAY_KEY_UTC_OFFSET_HOURS = 8
DEFAULT_CHECKIN_BASE_URL = "http://localhost:3000"

TOKEN_BYTES = 20
DAY_KEY_FORMAT = "%Y-%m-%d"
