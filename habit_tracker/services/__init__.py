"""Service-layer exports."""

from .habit_engine import DEFAULT_HISTORY_DAYS, DEFAULT_WINDOW_DAYS, HabitEngine
from .store_service import HabitStore, SqlHabitStore
from .validation_service import HabitInput, validate_habit_input

__all__ = [
    "HabitEngine",
    "DEFAULT_WINDOW_DAYS",
    "DEFAULT_HISTORY_DAYS",
    "HabitStore",
    "SqlHabitStore",
    "HabitInput",
    "validate_habit_input",
]
