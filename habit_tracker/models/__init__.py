"""SQLModel exports for Habit Tracker."""

from .habit_models import Habit, HabitEntry, HabitEntryRead, HabitRead
from .recurrence import Recurrence, RecurrenceKind, Weekday

__all__ = [
    "Habit",
    "HabitEntry",
    "HabitRead",
    "HabitEntryRead",
    "Recurrence",
    "RecurrenceKind",
    "Weekday",
]
