"""Core package exports."""

from .config import (
    BASE_DIR,
    DATABASE_URL,
    LOG_LEVEL,
    PROXY_PREFIX,
    SESSION_SECRET,
    get_entry_window_days,
    get_history_days,
    is_dev_login_enabled,
)
from .context import UserContext
from .db import Session, engine, get_db
from .errors import (
    HabitTrackerError,
    NotFoundError,
    StoreError,
    UndefinedRecurrenceError,
    ValidationError,
)

__all__ = [
    "BASE_DIR",
    "DATABASE_URL",
    "LOG_LEVEL",
    "PROXY_PREFIX",
    "SESSION_SECRET",
    "get_entry_window_days",
    "get_history_days",
    "is_dev_login_enabled",
    "UserContext",
    "engine",
    "Session",
    "get_db",
    "HabitTrackerError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "UndefinedRecurrenceError",
]
