"""Error taxonomy shared by the engine, the store and the web layer."""

from __future__ import annotations

from typing import Dict


class HabitTrackerError(Exception):
    """Base class for recoverable habit tracker errors."""


class ValidationError(HabitTrackerError):
    """Input failed validation; ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(summary or "invalid input")


class NotFoundError(HabitTrackerError):
    """Target habit is absent or not owned by the current user."""

    def __init__(self, habit_id):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} not found")


class StoreError(HabitTrackerError):
    """The backing store failed (connection, ownership or constraint)."""


class UndefinedRecurrenceError(ValueError):
    """Raised when a schedule has no defined due-date semantics."""
