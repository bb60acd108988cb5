"""Settings shared by every environment.

Environment modules star-import this and override what differs.
"""

import os


def _env_bool(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


def _env_weekdays(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(int(part) for part in raw.split(",") if part.strip())


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrm_db"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Leave workflow
LEAVE_APPROVAL_LEVELS = int(os.getenv("LEAVE_APPROVAL_LEVELS", "1"))
MAX_MANAGEMENT_CHAIN_DEPTH = int(os.getenv("MAX_MANAGEMENT_CHAIN_DEPTH", "10"))
STRICT_BALANCE_RELEASE = _env_bool("STRICT_BALANCE_RELEASE", "0")

# Calendar (Python weekday numbers, Monday = 0)
WEEKEND_DAYS = _env_weekdays("WEEKEND_DAYS", "5,6")
STANDARD_WORKDAY_MINUTES = int(os.getenv("STANDARD_WORKDAY_MINUTES", "480"))

DEBUG = False
TESTING = False
